"""Audit trail: one immutable row per changed field.

Business rules implemented:
- Append-only: the application never updates or deletes audit rows.
- ``user`` is protected (``PROTECT``): a user with audit history cannot be
  removed by a plain delete.  ``UserService.delete_user`` detaches the rows
  (``user=NULL``) before the hard delete; ``entity_id`` and ``changed_by``
  keep the identifiers.
- No-op changes (old == new) are never written (see ``AuditService``).
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from modules.core.models import UUIDModel


class EntityType(models.TextChoices):
    USER = "User", "User"
    ADDRESS = "Address", "Address"


class AuditLog(UUIDModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_logs",
        null=True,
        blank=True,
    )
    entity_type = models.CharField(max_length=50)
    entity_id = models.UUIDField()
    field_name = models.CharField(max_length=100)
    old_value = models.TextField(null=True, blank=True)  # noqa: DJ01
    new_value = models.TextField(null=True, blank=True)  # noqa: DJ01
    changed_at = models.DateTimeField(default=timezone.now)
    changed_by = models.UUIDField(null=True, blank=True)
    ip_address = models.CharField(max_length=45, null=True, blank=True)  # noqa: DJ01
    user_agent = models.CharField(max_length=500, null=True, blank=True)  # noqa: DJ01

    class Meta:
        db_table = "audit_logs"
        ordering = ["-changed_at", "field_name"]
        indexes = [
            models.Index(fields=["user", "-changed_at"], name="audit_user_changed_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["field_name"], name="audit_field_idx"),
            models.Index(fields=["changed_at"], name="audit_changed_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.entity_type}:{self.entity_id} {self.field_name} @ {self.changed_at}"
