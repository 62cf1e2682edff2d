"""User DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2; immutable
(``frozen=True``).  Field rules:

- first name: 4 to 100 letters/spaces, no character three times in a row;
- last name: 1 to 100 letters/spaces;
- CPF: sanitised to digits and checked with the CPF check digits;
- email: trimmed, lower-cased, well-formed (``EmailStr``);
- phone: 10 or 11 digits, valid area code (DDD 11 to 99);
- password: confirmation must match and it must not embed the user's
  names or email.  Strength rules are enforced by the service
  (``modules.users.passwords``) so each failed rule is reported;
- at least one address, at most one flagged primary.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from modules.addresses.dtos import CreateAddressDTO
from modules.users import cpf as cpf_utils
from modules.users import passwords

NAME_PATTERN = re.compile(r"^[A-Za-zÀ-ÿ\s]+$")
REPEATED_CHARACTER = re.compile(r"(.)\1\1", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"^[1-9]{2}9?[0-9]{8}$")  # DDD 11-99, optional mobile 9
MAX_PASSWORD_LENGTH = passwords.MAX_LENGTH


# ---------------------------------------------------------------------------
# Field rules (``None`` passes through: absent on updates)
# ---------------------------------------------------------------------------


def check_first_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not 4 <= len(v) <= 100:
        raise ValueError("Nome deve ter entre 4 e 100 caracteres")
    if not NAME_PATTERN.match(v):
        raise ValueError("Nome deve conter apenas letras e espaços")
    if REPEATED_CHARACTER.search(v):
        raise ValueError("Nome não pode ter caracteres repetidos em sequência")
    return v


def check_last_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not 1 <= len(v) <= 100:
        raise ValueError("Sobrenome deve ter entre 1 e 100 caracteres")
    if not NAME_PATTERN.match(v):
        raise ValueError("Sobrenome deve conter apenas letras e espaços")
    return v


def check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    digits = cpf_utils.clean(v)
    if not PHONE_PATTERN.match(digits):
        raise ValueError("Telefone inválido. Use DDD + número (10 ou 11 dígitos)")
    return digits


def strip_text(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def normalize_email_input(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateUserDTO(BaseModel):
    """Immutable DTO for user creation (administrative or self-registration)."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    cpf: str
    email: EmailStr
    phone: str
    password: str = Field(max_length=MAX_PASSWORD_LENGTH)
    confirm_password: str
    addresses: List[CreateAddressDTO] = Field(min_length=1)

    @field_validator("first_name", "last_name", "phone", mode="before")
    @classmethod
    def strip_names(cls, v: Any) -> Any:
        return strip_text(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return normalize_email_input(v)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        return check_first_name(v)

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        return check_last_name(v)

    @field_validator("cpf")
    @classmethod
    def validate_cpf(cls, v: str) -> str:
        """Accept formatted or raw input; store digits only."""
        if not cpf_utils.is_valid(v):
            raise ValueError("CPF inválido")
        return cpf_utils.clean(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return check_phone(v)

    @model_validator(mode="after")
    def validate_consistency(self) -> Self:
        if self.password != self.confirm_password:
            raise ValueError("As senhas não conferem")
        if passwords.contains_personal_data(
            self.password,
            self.first_name,
            self.last_name,
            self.email.split("@")[0],
        ):
            raise ValueError("A senha não pode conter seus dados pessoais")
        if sum(1 for address in self.addresses if address.is_primary) > 1:
            raise ValueError("Apenas um endereço pode ser marcado como principal")
        return self


class UpdateUserDTO(BaseModel):
    """Immutable DTO for user update requests.

    All fields are optional; ``None`` or blank leaves the field untouched.
    CPF cannot be changed.
    """

    model_config = ConfigDict(frozen=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(default=None, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("first_name", "last_name", "email", "phone", mode="before")
    @classmethod
    def blank_means_absent(cls, v: Any) -> Any:
        v = strip_text(v)
        return None if v == "" else v

    @field_validator("password", mode="before")
    @classmethod
    def blank_password_means_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return normalize_email_input(v)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: Optional[str]) -> Optional[str]:
        return check_first_name(v)

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: Optional[str]) -> Optional[str]:
        return check_last_name(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return check_phone(v)
