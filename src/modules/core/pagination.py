"""Page requests and page results shared by every list endpoint.

- ``PageRequest``: 1-based page number and a page size clamped to
  ``[1, MAX_PAGE_SIZE]``; built from query params (``page`` and
  ``limit`` / ``pageSize`` / ``page_size``).
- ``Page``: one slice of results plus the total count.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Mapping, TypeVar

from django.conf import settings
from django.db import models
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

PAGE_SIZE_PARAMS = ("limit", "pageSize", "page_size")
# Keeps the slice offset inside a signed 64-bit integer.
MAX_PAGE = 1_000_000


class PageRequest(BaseModel):
    """Immutable pagination input.

    Values below range are clamped; a page beyond ``MAX_PAGE`` is rejected.
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, le=MAX_PAGE)
    page_size: int = 20

    @field_validator("page")
    @classmethod
    def clamp_page(cls, v: int) -> int:
        return max(v, 1)

    @field_validator("page_size")
    @classmethod
    def clamp_page_size(cls, v: int) -> int:
        return min(max(v, 1), settings.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> PageRequest:
        """Build from request query params.

        Raises:
            pydantic.ValidationError: if a value is not an integer.
        """
        values: dict[str, Any] = {"page_size": settings.DEFAULT_PAGE_SIZE}
        if params.get("page") not in (None, ""):
            values["page"] = params.get("page")
        for name in PAGE_SIZE_PARAMS:
            if params.get(name) not in (None, ""):
                values["page_size"] = params.get(name)
                break
        return cls(**values)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.total_count else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_dict(self, serialize: Callable[[List[T]], Any]) -> dict:
        """Render the page for the response envelope's ``data`` field."""
        return {
            "items": serialize(self.items),
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
        }


def paginate(queryset: models.QuerySet, request: PageRequest) -> Page:
    """Count and slice ``queryset`` according to ``request``."""
    total = queryset.count()
    if request.offset >= total:
        items = []
    else:
        items = list(queryset[request.offset : request.offset + request.page_size])
    return Page(
        items=items,
        total_count=total,
        page=request.page,
        page_size=request.page_size,
    )
