"""Django ORM implementation of the Address repository.

Follows the Null Object pattern: look-ups return ``None`` for missing or
malformed ids; the Service Layer decides which error to raise.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

from modules.addresses.models import Address
from modules.addresses.repositories.interfaces import IAddressRepository

logger = structlog.get_logger(__name__)


class AddressDjangoRepository(IAddressRepository):
    """Concrete Address repository backed by Django ORM."""

    def get_by_id(self, id: UUID | str) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def save(self, entity: Address) -> Address:
        is_new = entity._state.adding
        entity.save()
        logger.debug("address.saved", address_id=str(entity.id), is_new=is_new)
        return entity

    def delete(self, id: UUID | str) -> bool:
        deleted, _ = Address.objects.filter(id=id).delete()
        return deleted > 0

    def get_owner(self, user_id: UUID | str):
        try:
            return get_user_model().objects.filter(id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def lock_owner(self, user_id: UUID | str):
        try:
            return (
                get_user_model().objects.select_for_update().filter(id=user_id).first()
            )
        except (ValueError, ValidationError):
            return None

    def list_for_user(self, user_id: UUID | str) -> List[Address]:
        return list(
            Address.objects.filter(user_id=user_id).order_by(
                "-is_primary", "created_at", "id"
            )
        )

    def count_for_user(self, user_id: UUID | str) -> int:
        return Address.objects.filter(user_id=user_id).count()

    def demote_primaries(
        self, user_id: UUID | str, excluding_id: Optional[UUID] = None
    ) -> List[UUID]:
        queryset = Address.objects.filter(user_id=user_id, is_primary=True)
        if excluding_id is not None:
            queryset = queryset.exclude(id=excluding_id)
        ids = list(queryset.values_list("id", flat=True))
        if ids:
            Address.objects.filter(id__in=ids).update(is_primary=False)
        return ids

    def delete_for_user(self, user_id: UUID | str) -> int:
        deleted, _ = Address.objects.filter(user_id=user_id).delete()
        return deleted
