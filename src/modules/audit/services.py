"""Audit recorder and audit queries.

Business rules enforced here:
- One row per changed field, ``old_value`` / ``new_value`` stored as text.
- No-op suppression: a change is skipped when the textual old and new
  values are equal (``None == None`` included).  Creation events
  (``old=None``, ``new`` set) and deletion events (``old`` set,
  ``new=None``) are therefore always recorded.
- Batch writes share one timestamp and are persisted in a single insert.
- An audit failure never aborts the business operation: the write runs in
  its own savepoint, errors are logged and swallowed.
- Reads are paginated, newest first, ties broken by field name.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.audit.dtos import AuditContext
from modules.audit.models import AuditLog
from modules.core.exceptions import ValidationFailed
from modules.core.pagination import Page, PageRequest, paginate
from modules.users import cpf as cpf_utils

if TYPE_CHECKING:
    from modules.audit.repositories.interfaces import IAuditLogRepository

logger = structlog.get_logger(__name__)

# Conventional field names for lifecycle events.
CREATED = "Created"
DELETED = "Deleted"


def as_text(value: Any) -> Optional[str]:
    """Textual form stored in ``old_value`` / ``new_value``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class AuditService:
    """Application service for the audit trail.

    Receives an ``IAuditLogRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IAuditLogRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def log_change(
        self,
        user_id: Optional[UUID],
        entity_type: str,
        entity_id: UUID,
        field_name: str,
        old_value: Any,
        new_value: Any,
        context: Optional[AuditContext] = None,
    ) -> Optional[AuditLog]:
        """Record one field change. Returns ``None`` when suppressed or failed."""
        entries = self.log_changes(
            user_id,
            entity_type,
            entity_id,
            {field_name: (old_value, new_value)},
            context,
        )
        return entries[0] if entries else None

    def log_changes(
        self,
        user_id: Optional[UUID],
        entity_type: str,
        entity_id: UUID,
        changes: Mapping[str, Tuple[Any, Any]],
        context: Optional[AuditContext] = None,
    ) -> List[AuditLog]:
        """Record several field changes of one entity with a shared timestamp."""
        context = context or AuditContext()
        changed_at = timezone.now()
        entries = []
        for field_name, (old_value, new_value) in changes.items():
            old_text, new_text = as_text(old_value), as_text(new_value)
            if old_text == new_text:
                continue
            entries.append(
                AuditLog(
                    user_id=user_id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    field_name=field_name,
                    old_value=old_text,
                    new_value=new_text,
                    changed_at=changed_at,
                    changed_by=context.actor_id,
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

        if not entries:
            logger.debug(
                "audit.changes_suppressed",
                entity_type=entity_type,
                entity_id=str(entity_id),
            )
            return []

        try:
            with transaction.atomic():
                saved = self._repo.add_many(entries)
        except Exception:
            logger.exception(
                "audit.write_failed",
                entity_type=entity_type,
                entity_id=str(entity_id),
                fields=[entry.field_name for entry in entries],
            )
            return []

        logger.info(
            "audit.recorded",
            entity_type=entity_type,
            entity_id=str(entity_id),
            count=len(saved),
        )
        return saved

    def detach_user(self, user_id: UUID) -> int:
        """Release the user reference before a hard delete. History is kept."""
        detached = self._repo.detach_user(user_id)
        logger.info("audit.user_detached", user_id=str(user_id), count=detached)
        return detached

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_user(self, user_id: UUID, page: PageRequest) -> Page[AuditLog]:
        return paginate(self._repo.for_user(user_id), page)

    def get_by_entity(
        self, entity_type: str, entity_id: UUID, page: PageRequest
    ) -> Page[AuditLog]:
        return paginate(self._repo.for_entity(entity_type, entity_id), page)

    def get_by_period(
        self, start: datetime, end: datetime, page: PageRequest
    ) -> Page[AuditLog]:
        return paginate(self._repo.for_period(start, end), page)

    def get_by_action(self, field_name: str, page: PageRequest) -> Page[AuditLog]:
        return paginate(self._repo.for_field(field_name), page)

    def get_by_cpf(self, cpf: str, page: PageRequest) -> Page[AuditLog]:
        """Entries about the user holding ``cpf`` (formatted or bare digits).

        Raises:
            ValidationFailed: if ``cpf`` has no digits.
        """
        digits = cpf_utils.clean(cpf)
        if not digits:
            raise ValidationFailed("CPF é obrigatório", ["CPF não pode ser vazio"])
        return paginate(self._repo.for_cpf(digits), page)
