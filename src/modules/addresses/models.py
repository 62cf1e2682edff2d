"""Address model.

Business rules implemented:
- Every address belongs to exactly one user (deleted with it).
- At most one primary address per user: partial unique constraint on
  ``user`` where ``is_primary`` is true.  The service demotes the previous
  primary before promoting a new one, so the constraint only fires on a
  genuine race.
- Field-wise duplicates per user are rejected by the service layer
  (``modules.addresses.guards``); case-folded comparison cannot be
  expressed as a portable database constraint.
- The last remaining address of a user cannot be deleted.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from modules.core.models import BaseModel

DEFAULT_COUNTRY = "Brasil"


class Address(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    street = models.CharField(max_length=200)
    number = models.CharField(max_length=15, null=True, blank=True)  # noqa: DJ01
    neighborhood = models.CharField(max_length=50, null=True, blank=True)  # noqa: DJ01
    complement = models.CharField(max_length=100, null=True, blank=True)  # noqa: DJ01
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=2)
    zip_code = models.CharField(max_length=10)
    country = models.CharField(max_length=100, default=DEFAULT_COUNTRY)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_primary", "created_at", "id"]
        indexes = [
            models.Index(fields=["user", "is_primary"], name="addresses_user_primary_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_primary=True),
                name="addresses_single_primary_per_user",
            ),
        ]

    def __str__(self) -> str:
        number = f", {self.number}" if self.number else ""
        return f"{self.street}{number} - {self.city}/{self.state}"
