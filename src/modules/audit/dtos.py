"""Audit DTOs.

- ``AuditContext``: who performed a change and from where (actor id,
  client IP, user agent).  Built once per request and passed down to every
  service command that records audit entries.
- ``PeriodQuery``: validated ``start`` / ``end`` bounds for period searches.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Self
from uuid import UUID

from django.utils import timezone
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.core.middleware import client_ip

if TYPE_CHECKING:
    from rest_framework.request import Request

USER_AGENT_MAX_LENGTH = 500


class AuditContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor_id: Optional[UUID] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("user_agent")
    @classmethod
    def truncate_user_agent(cls, v: Optional[str]) -> Optional[str]:
        return v[:USER_AGENT_MAX_LENGTH] if v else None

    @classmethod
    def from_request(cls, request: Request) -> AuditContext:
        user = getattr(request, "user", None)
        actor_id = user.id if user is not None and user.is_authenticated else None
        return cls(
            actor_id=actor_id,
            ip_address=client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT"),
        )


class PeriodQuery(BaseModel):
    """Inclusive period. Naive datetimes are read in the server time zone."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        if timezone.is_naive(v):
            return timezone.make_aware(v)
        return v

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.start > self.end:
            raise ValueError("A data inicial deve ser anterior ou igual à data final.")
        return self
