"""User aggregate (Django custom user model).

Business rules implemented:
- CPF is stored as 11 bare digits and is unique across active and
  inactive users (database unique constraint).
- Email is stored trimmed + lower-cased and is unique (case-insensitive by
  normalisation, enforced by a database unique constraint).
- ``updated_at`` is stamped by the service layer only when a field changed.
- Deactivation (``is_active=False``) is the normal way to retire a user;
  the hard-delete path lives in ``UserService.delete_user``.
"""

from __future__ import annotations

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.db import models

from modules.core.models import BaseModel
from modules.users import cpf as cpf_utils


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        if not email:
            raise ValueError("E-mail é obrigatório")
        if "cpf" in extra_fields:
            extra_fields["cpf"] = cpf_utils.clean(extra_fields["cpf"])
        user = self.model(email=normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, BaseModel):
    """Identity record. Owns ``addresses``; referenced by ``audit_logs``."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    cpf = models.CharField(max_length=11, unique=True)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=15)
    is_active = models.BooleanField(default=True)
    updated_at = models.DateTimeField(null=True, blank=True, default=None)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name", "cpf", "phone"]

    class Meta:
        db_table = "users"
        ordering = ["first_name", "last_name"]
        indexes = [
            models.Index(fields=["first_name", "last_name"], name="users_name_idx"),
            models.Index(fields=["is_active"], name="users_active_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} (CPF: {cpf_utils.mask(self.cpf)})"
