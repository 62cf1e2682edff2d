"""Address DTOs for the Service Layer.

Normalisation applied on input (before validation):
- every text value is trimmed;
- ``state`` is upper-cased;
- blank values become ``None`` (optional columns are stored as NULL);
- a missing ``country`` falls back to ``"Brasil"`` on creation.

On updates ``None`` means "not supplied".
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.addresses.models import DEFAULT_COUNTRY

ZIP_CODE_PATTERN = re.compile(r"^\d{5}-?\d{3}$")
STATE_PATTERN = re.compile(r"^[A-Z]{2}$")
CITY_PATTERN = re.compile(r"^[A-Za-zÀ-ÿ\s'.-]+$")

ADDRESS_FIELDS = (
    "street",
    "number",
    "neighborhood",
    "complement",
    "city",
    "state",
    "zip_code",
    "country",
)
MAX_LENGTH = {
    "street": 200,
    "number": 15,
    "neighborhood": 50,
    "complement": 100,
    "city": 100,
    "country": 100,
}


def normalize_payload(data: Any, creating: bool) -> Any:
    if not isinstance(data, dict):
        return data
    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if key == "state":
                value = value.upper()
            if not value and key in ADDRESS_FIELDS:
                value = None
        cleaned[key] = value
    if creating and cleaned.get("country") is None:
        cleaned["country"] = DEFAULT_COUNTRY
    return cleaned


# ---------------------------------------------------------------------------
# Field rules (``None`` passes through: absent on updates)
# ---------------------------------------------------------------------------


def check_street(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) < 5:
        raise ValueError("Rua deve ter entre 5 e 200 caracteres")
    return v


def check_city(v: Optional[str]) -> Optional[str]:
    if v is not None and (len(v) < 2 or not CITY_PATTERN.match(v)):
        raise ValueError("Cidade deve ter entre 2 e 100 caracteres, apenas letras")
    return v


def check_state(v: Optional[str]) -> Optional[str]:
    if v is not None and not STATE_PATTERN.match(v):
        raise ValueError("Estado deve ser a sigla com 2 letras")
    return v


def check_zip_code(v: Optional[str]) -> Optional[str]:
    if v is not None and not ZIP_CODE_PATTERN.match(v):
        raise ValueError("CEP deve estar no formato 00000-000 ou 00000000")
    return v


def check_max_length(v: Optional[str], field_name: str) -> Optional[str]:
    limit = MAX_LENGTH[field_name]
    if v is not None and len(v) > limit:
        raise ValueError(f"deve ter no máximo {limit} caracteres")
    return v


class _AddressRules(BaseModel):
    """Validators shared by the create and update payloads."""

    model_config = ConfigDict(frozen=True)

    @field_validator("street", check_fields=False)
    @classmethod
    def validate_street(cls, v: Optional[str]) -> Optional[str]:
        return check_street(v)

    @field_validator("city", check_fields=False)
    @classmethod
    def validate_city(cls, v: Optional[str]) -> Optional[str]:
        return check_city(v)

    @field_validator("state", check_fields=False)
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        return check_state(v)

    @field_validator("zip_code", check_fields=False)
    @classmethod
    def validate_zip_code(cls, v: Optional[str]) -> Optional[str]:
        return check_zip_code(v)

    @field_validator(*MAX_LENGTH, check_fields=False)
    @classmethod
    def validate_max_length(cls, v: Optional[str], info) -> Optional[str]:
        return check_max_length(v, info.field_name)


class CreateAddressDTO(_AddressRules):
    """Immutable DTO for a new address (standalone or nested in a user)."""

    street: str
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    complement: Optional[str] = None
    city: str
    state: str
    zip_code: str
    country: str = DEFAULT_COUNTRY
    is_primary: bool = False

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        return normalize_payload(data, creating=True)

    def address_values(self) -> Dict[str, Any]:
        """Address column values (``is_primary`` excluded)."""
        return {field: getattr(self, field) for field in ADDRESS_FIELDS}


class UpdateAddressDTO(_AddressRules):
    """Immutable DTO for address updates.

    All fields are optional.  Optional columns cannot be cleared through an
    update (a blank value is read as "not supplied").
    """

    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    complement: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    is_primary: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        return normalize_payload(data, creating=False)

    def changes(self) -> Dict[str, Any]:
        """Supplied address values (``is_primary`` excluded)."""
        return {
            field: getattr(self, field)
            for field in ADDRESS_FIELDS
            if getattr(self, field) is not None
        }
