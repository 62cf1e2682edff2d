"""Auth gateway: registration, login and token refresh atop the user directory.

Tokens are SimpleJWT pairs signed with HS256.  The subject claim (``sub``)
carries the user id; issuer, audience and lifetimes come from
``settings.SIMPLE_JWT``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import structlog
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from modules.accounts.exceptions import InvalidCredentials, InvalidToken
from modules.users.exceptions import UserNotFound

if TYPE_CHECKING:
    from modules.accounts.dtos import LoginDTO, RegisterDTO
    from modules.audit.dtos import AuditContext
    from modules.users.models import User
    from modules.users.services import UserService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    refresh_token: str
    expires_at: datetime
    user: User


class AuthService:
    """Application service for authentication use-cases.

    Receives the ``UserService`` via constructor injection (DIP).
    """

    def __init__(self, users: UserService) -> None:
        self._users = users

    def register(
        self, dto: RegisterDTO, context: Optional[AuditContext] = None
    ) -> AuthResult:
        """Create the account and sign it in.

        Raises:
            UserAlreadyExists: if the CPF or email is taken.
            WeakPassword: if the password fails the strength policy.
        """
        user = self._users.create_user(dto, context)
        logger.info("auth.registered", user_id=str(user.id))
        return self._issue(user)

    def login(self, dto: LoginDTO) -> AuthResult:
        """Raises ``InvalidCredentials`` for any authentication failure."""
        user = self._users.get_by_email(dto.email)
        if user is None or not user.check_password(dto.password):
            logger.warning("auth.login_failed", reason="bad_credentials")
            raise InvalidCredentials()
        if not user.is_active:
            logger.warning("auth.login_failed", reason="inactive", user_id=str(user.id))
            raise InvalidCredentials()
        logger.info("auth.login_succeeded", user_id=str(user.id))
        return self._issue(user)

    def refresh(self, refresh_token: str) -> AuthResult:
        """Exchange a refresh token for a new pair.

        Raises:
            InvalidToken: if the token is invalid or expired, or its
                subject no longer exists or is inactive.
        """
        try:
            token = RefreshToken(refresh_token)
            user = self._users.get_user(token[api_settings.USER_ID_CLAIM])
        except (TokenError, KeyError, UserNotFound):
            logger.warning("auth.refresh_rejected")
            raise InvalidToken()
        if not user.is_active:
            logger.warning("auth.refresh_rejected", user_id=str(user.id))
            raise InvalidToken()
        logger.info("auth.token_refreshed", user_id=str(user.id))
        return self._issue(user)

    def validate(self, token: str) -> bool:
        """True when ``token`` is a valid, unexpired access token."""
        try:
            AccessToken(token)
        except TokenError:
            return False
        return True

    def _issue(self, user: User) -> AuthResult:
        refresh = RefreshToken.for_user(user)
        access = refresh.access_token
        return AuthResult(
            access_token=str(access),
            refresh_token=str(refresh),
            expires_at=datetime.fromtimestamp(access["exp"], tz=timezone.utc),
            user=user,
        )
