"""Address repository interface.

Extends ``IRepository[Address]`` with the owner-scoped look-ups needed by
the duplicate guard, the primary address rule and the last-address rule.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.addresses.models import Address
    from modules.users.models import User


class IAddressRepository(IRepository["Address"]):
    """Repository contract for addresses."""

    @abstractmethod
    def get_owner(self, user_id: UUID | str) -> Optional[User]:
        """Retrieve the owning user without locking."""

    @abstractmethod
    def lock_owner(self, user_id: UUID | str) -> Optional[User]:
        """Retrieve the owning user row with ``SELECT ... FOR UPDATE``."""

    @abstractmethod
    def list_for_user(self, user_id: UUID | str) -> List[Address]:
        """Addresses of a user, primary first, then oldest first."""

    @abstractmethod
    def count_for_user(self, user_id: UUID | str) -> int:
        """Number of addresses owned by a user."""

    @abstractmethod
    def demote_primaries(
        self, user_id: UUID | str, excluding_id: Optional[UUID] = None
    ) -> List[UUID]:
        """Clear the primary flag of the user's other addresses; return their ids."""

    @abstractmethod
    def delete_for_user(self, user_id: UUID | str) -> int:
        """Remove every address of a user."""
