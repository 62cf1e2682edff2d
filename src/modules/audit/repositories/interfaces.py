"""Audit log repository interface.

Append-only: there is no update or delete in the contract.  Look-ups
return unevaluated querysets so the service can paginate them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List
from uuid import UUID

from django.db import models

if TYPE_CHECKING:
    from modules.audit.models import AuditLog


class IAuditLogRepository(ABC):
    """Repository contract for audit entries."""

    @abstractmethod
    def add_many(self, entries: Iterable[AuditLog]) -> List[AuditLog]:
        """Persist new entries in one write."""

    @abstractmethod
    def for_user(self, user_id: UUID | str) -> "models.QuerySet[AuditLog]":
        """Entries whose subject is the given user."""

    @abstractmethod
    def for_entity(
        self, entity_type: str, entity_id: UUID | str
    ) -> "models.QuerySet[AuditLog]":
        """Entries about one entity."""

    @abstractmethod
    def for_period(self, start: datetime, end: datetime) -> "models.QuerySet[AuditLog]":
        """Entries changed within ``[start, end]``."""

    @abstractmethod
    def for_field(self, field_name: str) -> "models.QuerySet[AuditLog]":
        """Entries touching the given field (case-insensitive)."""

    @abstractmethod
    def for_cpf(self, cpf: str) -> "models.QuerySet[AuditLog]":
        """Entries whose subject user has the given CPF (digits only)."""

    @abstractmethod
    def detach_user(self, user_id: UUID | str) -> int:
        """Clear the user reference of every entry about ``user_id``."""
