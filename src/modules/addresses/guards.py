"""Address duplicate guard.

Two addresses of the same user are duplicates when every comparable field
(street, number, neighborhood, complement, city, state, zip code, country)
is equal after trimming and case-folding, with missing values read as ``""``.

The guard is pure: callers pass the owner's current addresses, loaded
inside the same transaction as the write (with the owner row locked).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple
from uuid import UUID

COMPARABLE_FIELDS = (
    "street",
    "number",
    "neighborhood",
    "complement",
    "city",
    "state",
    "zip_code",
    "country",
)


def _value(address: Any, field: str) -> Any:
    if isinstance(address, Mapping):
        return address.get(field)
    return getattr(address, field, None)


def normalize(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def comparable_key(address: Any) -> Tuple[str, ...]:
    """Normalised tuple of the comparable fields of a model, DTO or mapping."""
    return tuple(normalize(_value(address, field)) for field in COMPARABLE_FIELDS)


def would_duplicate(
    user_id: UUID,
    candidate: Any,
    existing_addresses: Iterable[Any],
    excluding_address_id: Optional[UUID] = None,
) -> bool:
    """True when ``candidate`` matches an address of ``user_id`` field-wise.

    Addresses owned by other users and the one with ``excluding_address_id``
    (the address being updated) are ignored.
    """
    key = comparable_key(candidate)
    for address in existing_addresses:
        if str(_value(address, "user_id")) != str(user_id):
            continue
        if excluding_address_id is not None and str(_value(address, "id")) == str(
            excluding_address_id
        ):
            continue
        if comparable_key(address) == key:
            return True
    return False
