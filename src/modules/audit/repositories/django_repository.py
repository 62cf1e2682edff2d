"""Django ORM implementation of the audit log repository."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import models

from modules.audit.models import AuditLog
from modules.audit.repositories.interfaces import IAuditLogRepository

ORDERING = ("-changed_at", "field_name")


class AuditLogDjangoRepository(IAuditLogRepository):
    """Concrete audit repository backed by Django ORM."""

    def _ordered(self, **lookups) -> models.QuerySet:
        return AuditLog.objects.filter(**lookups).order_by(*ORDERING)

    def add_many(self, entries: Iterable[AuditLog]) -> List[AuditLog]:
        return AuditLog.objects.bulk_create(list(entries))

    def for_user(self, user_id: UUID | str) -> models.QuerySet:
        try:
            return self._ordered(user_id=user_id)
        except (ValueError, ValidationError):
            return AuditLog.objects.none()

    def for_entity(self, entity_type: str, entity_id: UUID | str) -> models.QuerySet:
        try:
            return self._ordered(entity_type__iexact=entity_type, entity_id=entity_id)
        except (ValueError, ValidationError):
            return AuditLog.objects.none()

    def for_period(self, start: datetime, end: datetime) -> models.QuerySet:
        return self._ordered(changed_at__range=(start, end))

    def for_field(self, field_name: str) -> models.QuerySet:
        return self._ordered(field_name__iexact=field_name)

    def for_cpf(self, cpf: str) -> models.QuerySet:
        return self._ordered(user__cpf=cpf)

    def detach_user(self, user_id: UUID | str) -> int:
        return AuditLog.objects.filter(user_id=user_id).update(user=None)
