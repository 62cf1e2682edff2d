"""Django ORM implementation of the User repository.

Satisfies ``IUserRepository`` using Django's QuerySet API.  Look-ups
follow the Null Object pattern: missing or malformed ids yield ``None``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Prefetch, Q

from modules.addresses.models import Address
from modules.users import cpf as cpf_utils
from modules.users.filters import UserFilter
from modules.users.models import User
from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


def _with_addresses(queryset: models.QuerySet) -> models.QuerySet:
    return queryset.prefetch_related(
        Prefetch(
            "addresses",
            queryset=Address.objects.order_by("-is_primary", "created_at", "id"),
        )
    )


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    def get_by_id(self, id: UUID | str) -> Optional[User]:
        try:
            return User.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def save(self, entity: User) -> User:
        is_new = entity._state.adding
        entity.save()
        logger.info("user.saved", user_id=str(entity.id), is_new=is_new)
        return entity

    def delete(self, id: UUID | str) -> bool:
        deleted, _ = User.objects.filter(id=id).delete()
        return deleted > 0

    def get_by_email(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email.strip()).first()

    def get_by_cpf(self, cpf: str) -> Optional[User]:
        return User.objects.filter(cpf=cpf_utils.clean(cpf)).first()

    def cpf_taken(self, cpf: str, exclude_id: Optional[UUID] = None) -> bool:
        queryset = User.objects.filter(cpf=cpf_utils.clean(cpf))
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def email_taken(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        queryset = User.objects.filter(email__iexact=email.strip())
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def search(
        self,
        term: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> models.QuerySet:
        queryset = User.objects.all()
        if filters:
            queryset = UserFilter(filters, queryset=queryset).qs
        term = (term or "").strip()
        if term:
            condition = (
                Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
                | Q(email__icontains=term)
            )
            digits = cpf_utils.clean(term)
            if digits:
                condition |= Q(cpf__contains=digits)
            queryset = queryset.filter(condition)
        return _with_addresses(queryset.order_by("first_name", "last_name", "id"))

    def get_with_addresses(self, id: UUID | str) -> Optional[User]:
        try:
            return _with_addresses(User.objects.filter(id=id)).first()
        except (ValueError, ValidationError):
            return None
