"""Base abstract models shared by every aggregate of the ERP.

Provides:
- ``UUIDModel``: UUIDv7 primary key (time-ordered, index friendly).
- ``BaseModel``: ``UUIDModel`` plus an immutable ``created_at`` timestamp.

``updated_at`` is declared on the models that carry it (``User`` stamps it
explicitly, only when a field actually changes).
"""

from __future__ import annotations

import uuid6
from django.db import models

# ---------------------------------------------------------------------------
# Primary key
# ---------------------------------------------------------------------------


class UUIDModel(models.Model):
    """Abstract base with a UUIDv7 primary key."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )

    class Meta:
        abstract = True


# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(UUIDModel):
    """Abstract base with UUIDv7 PK and creation timestamp."""

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
