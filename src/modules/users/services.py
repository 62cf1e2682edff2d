"""User directory service layer (Use Cases).

Orchestrates the User aggregate, delegating persistence to the injected
``IUserRepository``, address handling to ``AddressService`` and change
history to ``AuditService``.

Business rules enforced here:
- CPF and email are unique across active and inactive users.  The
  repository pre-check gives the friendly message; the database unique
  constraints are authoritative (``IntegrityError`` -> conflict).
- Passwords must satisfy the strength policy; every failed rule is reported.
- Partial updates: absent fields are untouched, a supplied password is
  always re-hashed, ``updated_at`` is stamped only when something changed.
- Activation/deactivation is idempotent: no write, no stamp, no audit
  when the flag already has the target value.
- Hard delete is refused for the administrative account and for the
  requester's own account; addresses go first, audit history is detached
  from the user and kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.addresses.dtos import CreateAddressDTO
from modules.audit.models import EntityType
from modules.audit.services import CREATED, DELETED
from modules.core.pagination import Page, PageRequest, paginate
from modules.users import cpf as cpf_utils
from modules.users import passwords
from modules.users.exceptions import (
    ProtectedUser,
    UserAlreadyExists,
    UserNotFound,
    WeakPassword,
)
from modules.users.models import User, normalize_email

if TYPE_CHECKING:
    from modules.addresses.models import Address
    from modules.addresses.services import AddressService
    from modules.audit.dtos import AuditContext
    from modules.audit.services import AuditService
    from modules.users.dtos import CreateUserDTO, UpdateUserDTO
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)

CPF_TAKEN = "CPF já cadastrado"
EMAIL_TAKEN = "E-mail já cadastrado"
PASSWORD_CHANGED = "[alterada]"

ADMIN_PROFILE = {
    "first_name": "Administrador",
    "last_name": "Sistema",
    "phone": "11999999999",
}
ADMIN_ADDRESS = {
    "street": "Avenida Paulista",
    "number": "1000",
    "neighborhood": "Bela Vista",
    "city": "São Paulo",
    "state": "SP",
    "zip_code": "01310-100",
    "is_primary": True,
}


def ensure_strong_password(password: str) -> None:
    """Raises ``WeakPassword`` listing every failed rule."""
    errors = passwords.validation_errors(password)
    if errors:
        raise WeakPassword(errors=errors)


class UserService:
    """Application service for User use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IUserRepository,
        addresses: AddressService,
        audit: AuditService,
    ) -> None:
        self._repo = repository
        self._addresses = addresses
        self._audit = audit

    # ------------------------------------------------------------------
    # Uniqueness
    # ------------------------------------------------------------------

    def cpf_exists(self, cpf: str, exclude_id: Optional[UUID] = None) -> bool:
        return self._repo.cpf_taken(cpf_utils.clean(cpf), exclude_id)

    def email_exists(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        return self._repo.email_taken(normalize_email(email), exclude_id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_user(
        self, dto: CreateUserDTO, context: Optional[AuditContext] = None
    ) -> User:
        """Create a user and its addresses.

        Raises:
            UserAlreadyExists: if the CPF or the email is already registered.
            WeakPassword: if the password fails the strength policy.
            DuplicateAddress: if the payload repeats an address.
        """
        email = normalize_email(dto.email)
        cpf = cpf_utils.clean(dto.cpf)
        log = logger.bind(email=email)

        if self.cpf_exists(cpf):
            log.warning("user.duplicate_cpf")
            raise UserAlreadyExists(CPF_TAKEN)
        if self.email_exists(email):
            log.warning("user.duplicate_email")
            raise UserAlreadyExists(EMAIL_TAKEN)
        ensure_strong_password(dto.password)

        user = User(
            first_name=dto.first_name,
            last_name=dto.last_name,
            cpf=cpf,
            email=email,
            phone=dto.phone,
            is_active=True,
        )
        user.set_password(dto.password)
        user = self._save_unique(user, log)

        for address in dto.addresses:
            self._addresses.add_to_user(user, address, context)

        self._audit.log_change(
            user.id, EntityType.USER, user.id, CREATED, None, user.email, context
        )
        log.info("user.created", user_id=str(user.id), addresses=len(dto.addresses))
        return self._repo.get_with_addresses(user.id)

    @transaction.atomic
    def update_user(
        self,
        user_id: UUID,
        dto: UpdateUserDTO,
        context: Optional[AuditContext] = None,
    ) -> User:
        """Apply the supplied fields of ``dto``.

        Raises:
            UserNotFound: if the user does not exist.
            UserAlreadyExists: if the new email belongs to another user.
            WeakPassword: if a new password fails the strength policy.
        """
        user = self.get_user(user_id)
        log = logger.bind(user_id=str(user.id))
        changes: Dict[str, Tuple[Any, Any]] = {}

        if dto.email is not None:
            email = normalize_email(dto.email)
            if email != user.email:
                if self.email_exists(email, exclude_id=user.id):
                    log.warning("user.duplicate_email")
                    raise UserAlreadyExists(EMAIL_TAKEN)
                changes["email"] = (user.email, email)
                user.email = email

        for field in ("first_name", "last_name", "phone"):
            value = getattr(dto, field)
            if value is not None and value != getattr(user, field):
                changes[field] = (getattr(user, field), value)
                setattr(user, field, value)

        if dto.password is not None:
            ensure_strong_password(dto.password)
            user.set_password(dto.password)
            changes["password"] = (None, PASSWORD_CHANGED)

        if not changes:
            log.info("user.update_noop")
            return self._repo.get_with_addresses(user.id)

        user.updated_at = timezone.now()
        self._save_unique(user, log)
        self._audit.log_changes(user.id, EntityType.USER, user.id, changes, context)
        log.info("user.updated", fields=sorted(changes))
        return self._repo.get_with_addresses(user.id)

    def deactivate_user(
        self, user_id: UUID, context: Optional[AuditContext] = None
    ) -> User:
        """Soft delete. Raises ``UserNotFound``."""
        return self._set_active(user_id, False, context)

    def activate_user(self, user_id: UUID, context: Optional[AuditContext] = None) -> User:
        """Raises ``UserNotFound``."""
        return self._set_active(user_id, True, context)

    @transaction.atomic
    def delete_user(
        self,
        user_id: UUID,
        requester_id: Optional[UUID],
        context: Optional[AuditContext] = None,
    ) -> None:
        """Permanently remove a user and its addresses.

        Raises:
            UserNotFound: if the user does not exist.
            ProtectedUser: for the administrative account or the requester.
        """
        user = self.get_user(user_id)
        log = logger.bind(user_id=str(user.id))

        if user.email == normalize_email(settings.ADMIN_EMAIL):
            log.warning("user.delete_admin_refused")
            raise ProtectedUser("Não é possível excluir o usuário administrador")
        if requester_id is not None and str(user.id) == str(requester_id):
            log.warning("user.delete_self_refused")
            raise ProtectedUser("Você não pode excluir sua própria conta")

        self._addresses.remove_all_for_user(user.id)
        self._audit.detach_user(user.id)
        self._repo.delete(user.id)
        self._audit.log_change(
            None, EntityType.USER, user.id, DELETED, user.email, None, context
        )
        log.info("user.hard_deleted")

    @transaction.atomic
    def ensure_admin(self) -> Tuple[User, bool]:
        """Create the administrative account if missing.

        Returns ``(user, created)``.
        """
        email = normalize_email(settings.ADMIN_EMAIL)
        existing = self._repo.get_by_email(email)
        if existing is not None:
            return existing, False

        user = User(cpf=cpf_utils.clean(settings.ADMIN_CPF), email=email, **ADMIN_PROFILE)
        user.set_password(settings.ADMIN_PASSWORD)
        user = self._repo.save(user)
        self._addresses.add_to_user(user, CreateAddressDTO(**ADMIN_ADDRESS))
        self._audit.log_change(user.id, EntityType.USER, user.id, CREATED, None, email)
        logger.info("user.admin_seeded", user_id=str(user.id))
        return user, True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user(self, user_id: UUID) -> User:
        """Retrieve a user with addresses. Raises ``UserNotFound``."""
        user = self._repo.get_with_addresses(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self._repo.get_by_email(normalize_email(email))

    def get_by_cpf(self, cpf: str) -> Optional[User]:
        return self._repo.get_by_cpf(cpf_utils.clean(cpf))

    def list_users(
        self,
        page: PageRequest,
        search: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Page[User]:
        """Directory listing ordered by first then last name."""
        return paginate(self._repo.search(search, filters), page)

    def list_addresses(self, user_id: UUID) -> List[Address]:
        """Raises ``UserNotFound``."""
        self.get_user(user_id)
        return self._addresses.list_for_user(user_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @transaction.atomic
    def _set_active(
        self, user_id: UUID, active: bool, context: Optional[AuditContext]
    ) -> User:
        user = self.get_user(user_id)
        log = logger.bind(user_id=str(user.id), is_active=active)
        if user.is_active == active:
            log.info("user.active_flag_unchanged")
            return user

        previous = user.is_active
        user.is_active = active
        user.updated_at = timezone.now()
        self._repo.save(user)
        self._audit.log_change(
            user.id, EntityType.USER, user.id, "is_active", previous, active, context
        )
        log.info("user.activated" if active else "user.deactivated")
        return user

    def _save_unique(self, user: User, log) -> User:
        """Save; a unique-constraint violation is reported as a conflict."""
        try:
            with transaction.atomic():
                return self._repo.save(user)
        except IntegrityError:
            log.warning("user.unique_violation")
            raise UserAlreadyExists("CPF ou e-mail já cadastrado")
