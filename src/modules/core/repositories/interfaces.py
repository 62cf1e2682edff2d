"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that every
module repository interface (users, addresses) extends.  Service-layer
code depends on these abstractions, never on the Django ORM directly.
Look-ups return ``None`` for missing or malformed ids.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar, Union
from uuid import UUID

T = TypeVar("T")

EntityId = Union[UUID, str]


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` is the model managed by the repository
    (``User``, ``Address``).
    """

    @abstractmethod
    def get_by_id(self, id: EntityId) -> Optional[T]:
        """Retrieve an entity by its UUID primary key."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or update an entity."""

    @abstractmethod
    def delete(self, id: EntityId) -> bool:
        """Hard delete; ``False`` when nothing matched."""
