"""User repository interface.

Extends ``IRepository[User]`` with the look-ups behind the CPF / email
uniqueness rules and the directory search.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.users.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for the User aggregate."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by email (case-insensitive)."""

    @abstractmethod
    def get_by_cpf(self, cpf: str) -> Optional[User]:
        """Retrieve a user by CPF (digits only)."""

    @abstractmethod
    def cpf_taken(self, cpf: str, exclude_id: Optional[UUID] = None) -> bool:
        """True when another user (active or not) holds ``cpf``."""

    @abstractmethod
    def email_taken(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        """True when another user (active or not) holds ``email``."""

    @abstractmethod
    def search(
        self,
        term: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> "models.QuerySet[User]":
        """Users matching ``term`` on names, email or CPF, ordered by name.

        ``filters`` are query params understood by ``UserFilter``.
        """

    @abstractmethod
    def get_with_addresses(self, id: UUID | str) -> Optional[User]:
        """Retrieve a user with addresses prefetched (primary first)."""
