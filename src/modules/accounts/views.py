"""Authentication API views.

``register``, ``login``, ``refresh`` and ``validate`` are public (no
authentication attempted, so an expired header does not block a login);
``me`` requires a valid bearer token.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.accounts.dtos import LoginDTO, RefreshDTO, RegisterDTO, ValidateTokenDTO
from modules.accounts.serializers import AuthResultSerializer
from modules.accounts.services import AuthService
from modules.audit.dtos import AuditContext
from modules.core.responses import ok
from modules.users.serializers import UserSerializer
from modules.users.views import build_user_service

PUBLIC = {"permission_classes": [AllowAny], "authentication_classes": []}


class AuthViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._users = build_user_service()
        self._service = AuthService(users=self._users)

    @action(detail=False, methods=["post"], **PUBLIC)
    def register(self, request: Request) -> Response:
        """POST /api/v1/auth/register"""
        dto = RegisterDTO.model_validate(request.data)
        result = self._service.register(dto, AuditContext.from_request(request))
        return Response(
            ok(AuthResultSerializer(result).data, "Usuário registrado com sucesso"),
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], **PUBLIC)
    def login(self, request: Request) -> Response:
        """POST /api/v1/auth/login"""
        result = self._service.login(LoginDTO.model_validate(request.data))
        return Response(ok(AuthResultSerializer(result).data, "Login realizado com sucesso"))

    @action(detail=False, methods=["post"], **PUBLIC)
    def refresh(self, request: Request) -> Response:
        """POST /api/v1/auth/refresh"""
        dto = RefreshDTO.model_validate(request.data)
        result = self._service.refresh(dto.refresh_token)
        return Response(ok(AuthResultSerializer(result).data, "Token renovado com sucesso"))

    @action(detail=False, methods=["post"], **PUBLIC)
    def validate(self, request: Request) -> Response:
        """POST /api/v1/auth/validate; ``data`` is a boolean."""
        dto = ValidateTokenDTO.model_validate(request.data)
        valid = self._service.validate(dto.token)
        return Response(ok(valid, "Token válido" if valid else "Token inválido"))

    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated])
    def me(self, request: Request) -> Response:
        """GET /api/v1/auth/me"""
        user = self._users.get_user(request.user.id)
        return Response(ok(UserSerializer(user).data))
