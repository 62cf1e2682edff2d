"""Authentication DTOs.

- ``RegisterDTO``: self-service sign-up; same rules as ``CreateUserDTO``
  (confirmation, CPF check digits, at least one address).
- ``LoginDTO``: email + password.
- ``RefreshDTO``: a refresh token issued by ``/auth/login``.
- ``ValidateTokenDTO``: an access token to check.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.users.dtos import CreateUserDTO


class RegisterDTO(CreateUserDTO):
    """Immutable DTO for ``POST /auth/register``."""


class LoginDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class RefreshDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    refresh_token: str = Field(min_length=1)


class ValidateTokenDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1)
