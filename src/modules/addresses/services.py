"""Address service layer (Use Cases).

Business rules enforced here:
- The owner must exist and be active to receive a new address.
- No field-wise duplicate address per user (``guards.would_duplicate``),
  evaluated after locking the owner row, inside the write transaction.
- At most one primary address per user: other primaries are demoted
  before the target is promoted, in the same transaction.
- The last remaining address of a user cannot be deleted.
- Every mutation is recorded in the audit trail.
- A database constraint violation on save is reported as a conflict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from django.db import IntegrityError, transaction

from modules.addresses.exceptions import (
    AddressConflict,
    AddressNotFound,
    AddressOwnerUnavailable,
    DuplicateAddress,
    LastAddressRequired,
)
from modules.addresses.guards import COMPARABLE_FIELDS, would_duplicate
from modules.addresses.models import Address
from modules.audit.models import EntityType
from modules.audit.services import CREATED, DELETED

if TYPE_CHECKING:
    from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO
    from modules.addresses.repositories.interfaces import IAddressRepository
    from modules.audit.dtos import AuditContext
    from modules.audit.services import AuditService
    from modules.users.models import User

logger = structlog.get_logger(__name__)

PRIMARY_FIELD = "is_primary"


class AddressService:
    """Application service for Address use-cases.

    Receives an ``IAddressRepository`` and the ``AuditService`` via
    constructor injection (DIP).
    """

    def __init__(self, repository: IAddressRepository, audit: AuditService) -> None:
        self._repo = repository
        self._audit = audit

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_for_user(self, user_id: UUID) -> List[Address]:
        """Addresses of a user, primary first.

        Raises:
            AddressOwnerUnavailable: if the user does not exist.
        """
        if self._repo.get_owner(user_id) is None:
            raise AddressOwnerUnavailable("Usuário não encontrado")
        return self._repo.list_for_user(user_id)

    def get_address(self, address_id: UUID) -> Address:
        """Raises ``AddressNotFound`` when missing."""
        address = self._repo.get_by_id(address_id)
        if address is None:
            raise AddressNotFound()
        return address

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_address(
        self,
        user_id: UUID,
        dto: CreateAddressDTO,
        context: Optional[AuditContext] = None,
    ) -> Address:
        """Append an address to an active user.

        Raises:
            AddressOwnerUnavailable: if the user is missing or inactive.
            DuplicateAddress: if the user already has the same address.
        """
        owner = self._repo.lock_owner(user_id)
        if owner is None or not owner.is_active:
            logger.warning("address.owner_unavailable", user_id=str(user_id))
            raise AddressOwnerUnavailable()
        return self.add_to_user(owner, dto, context)

    def add_to_user(
        self,
        owner: User,
        dto: CreateAddressDTO,
        context: Optional[AuditContext] = None,
    ) -> Address:
        """Persist an address for ``owner`` inside the caller's transaction.

        The caller holds the owner row (locked, or inserted in the same
        transaction).
        """
        log = logger.bind(user_id=str(owner.id))

        if would_duplicate(owner.id, dto, self._repo.list_for_user(owner.id)):
            log.warning("address.duplicate_rejected")
            raise DuplicateAddress()

        if dto.is_primary:
            self._demote_other_primaries(owner.id, None, context)

        address = Address(user=owner, is_primary=dto.is_primary, **dto.address_values())
        address = self._save(address, log)

        self._audit.log_change(
            owner.id,
            EntityType.ADDRESS,
            address.id,
            CREATED,
            None,
            str(address),
            context,
        )
        log.info("address.created", address_id=str(address.id), is_primary=dto.is_primary)
        return address

    @transaction.atomic
    def update_address(
        self,
        address_id: UUID,
        dto: UpdateAddressDTO,
        context: Optional[AuditContext] = None,
    ) -> Address:
        """Partial update; the duplicate guard sees the merged result.

        Raises:
            AddressNotFound: if the address does not exist.
            DuplicateAddress: if the result equals another address of the owner.
        """
        address = self.get_address(address_id)
        self._repo.lock_owner(address.user_id)
        log = logger.bind(address_id=str(address.id), user_id=str(address.user_id))

        supplied = dto.changes()
        merged = {
            field: supplied.get(field, getattr(address, field))
            for field in COMPARABLE_FIELDS
        }
        if would_duplicate(
            address.user_id,
            merged,
            self._repo.list_for_user(address.user_id),
            excluding_address_id=address.id,
        ):
            log.warning("address.duplicate_rejected")
            raise DuplicateAddress()

        changes: Dict[str, Tuple[Any, Any]] = {}
        for field, value in supplied.items():
            if getattr(address, field) != value:
                changes[field] = (getattr(address, field), value)
                setattr(address, field, value)

        if dto.is_primary is not None and dto.is_primary != address.is_primary:
            if dto.is_primary:
                self._demote_other_primaries(address.user_id, address.id, context)
            changes[PRIMARY_FIELD] = (address.is_primary, dto.is_primary)
            address.is_primary = dto.is_primary

        if not changes:
            log.info("address.update_noop")
            return address

        address = self._save(address, log)
        self._audit.log_changes(
            address.user_id, EntityType.ADDRESS, address.id, changes, context
        )
        log.info("address.updated", fields=sorted(changes))
        return address

    @transaction.atomic
    def delete_address(
        self, address_id: UUID, context: Optional[AuditContext] = None
    ) -> None:
        """Remove an address that is not the owner's last one.

        Raises:
            AddressNotFound: if the address does not exist.
            LastAddressRequired: if it is the only address of its owner.
        """
        address = self.get_address(address_id)
        self._repo.lock_owner(address.user_id)
        log = logger.bind(address_id=str(address.id), user_id=str(address.user_id))

        if self._repo.count_for_user(address.user_id) <= 1:
            log.warning("address.last_address_protected")
            raise LastAddressRequired()

        description = str(address)
        self._repo.delete(address.id)
        self._audit.log_change(
            address.user_id,
            EntityType.ADDRESS,
            address.id,
            DELETED,
            description,
            None,
            context,
        )
        log.info("address.deleted")

    @transaction.atomic
    def set_primary(
        self, address_id: UUID, context: Optional[AuditContext] = None
    ) -> Address:
        """Make ``address_id`` the only primary address of its owner.

        Raises:
            AddressNotFound: if the address does not exist.
        """
        address = self.get_address(address_id)
        self._repo.lock_owner(address.user_id)

        self._demote_other_primaries(address.user_id, address.id, context)
        if not address.is_primary:
            address.is_primary = True
            self._save(address, logger.bind(address_id=str(address.id)))
            self._audit.log_change(
                address.user_id,
                EntityType.ADDRESS,
                address.id,
                PRIMARY_FIELD,
                False,
                True,
                context,
            )
        logger.info(
            "address.primary_set", address_id=str(address.id), user_id=str(address.user_id)
        )
        return address

    def remove_all_for_user(self, user_id: UUID) -> int:
        """Delete every address of a user. Only used by the user hard delete."""
        removed = self._repo.delete_for_user(user_id)
        logger.info("address.removed_for_user", user_id=str(user_id), count=removed)
        return removed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _demote_other_primaries(
        self,
        user_id: UUID,
        excluding_id: Optional[UUID],
        context: Optional[AuditContext],
    ) -> List[UUID]:
        demoted = self._repo.demote_primaries(user_id, excluding_id)
        for demoted_id in demoted:
            self._audit.log_change(
                user_id, EntityType.ADDRESS, demoted_id, PRIMARY_FIELD, True, False, context
            )
        if demoted:
            logger.info(
                "address.primaries_demoted",
                user_id=str(user_id),
                count=len(demoted),
            )
        return demoted

    def _save(self, address: Address, log) -> Address:
        """Save; a constraint violation is reported as a conflict."""
        try:
            with transaction.atomic():
                return self._repo.save(address)
        except IntegrityError:
            log.warning("address.constraint_violation")
            raise AddressConflict()
