"""Password strength policy.

Rules (each failed rule contributes exactly one message):
- non-empty (checked alone: an empty password reports only this);
- length between 8 and 128;
- at least one lowercase letter, one uppercase letter, one digit and one
  non-alphanumeric character;
- no trivial sequence (``123``, ``abc``, ``qwe``, ``asd``, ``zxcv``),
  compared case-insensitively;
- not a simple password: one repeated character, exactly eight digits,
  exactly eight lowercase or uppercase letters, or a common password.

The same rules back Django's ``AUTH_PASSWORD_VALIDATORS`` through
``PasswordPolicyValidator``.  Hashing is left to Django's hasher framework.
"""

from __future__ import annotations

import re
from typing import List, Optional

from django.core.exceptions import ValidationError

MIN_LENGTH = 8
MAX_LENGTH = 128

FORBIDDEN_SEQUENCES = ("123", "abc", "qwe", "asd", "zxcv")
COMMON_PASSWORDS = frozenset({"password", "12345678", "qwertyui", "abcdefgh"})

_SIMPLE_PATTERNS = (
    re.compile(r"^(.)\1{7,}$"),
    re.compile(r"^[0-9]{8}$"),
    re.compile(r"^[a-z]{8}$"),
    re.compile(r"^[A-Z]{8}$"),
)

EMPTY = "A senha é obrigatória."
BAD_LENGTH = f"A senha deve ter entre {MIN_LENGTH} e {MAX_LENGTH} caracteres."
NO_LOWER = "A senha deve conter pelo menos uma letra minúscula."
NO_UPPER = "A senha deve conter pelo menos uma letra maiúscula."
NO_DIGIT = "A senha deve conter pelo menos um número."
NO_SPECIAL = "A senha deve conter pelo menos um caractere especial."
HAS_SEQUENCE = "A senha não pode conter sequências simples (123, abc, qwe...)."
TOO_SIMPLE = "A senha é muito simples."


def is_simple(password: str) -> bool:
    if password.lower() in COMMON_PASSWORDS:
        return True
    return any(pattern.match(password) for pattern in _SIMPLE_PATTERNS)


def validation_errors(password: Optional[str]) -> List[str]:
    if not password:
        return [EMPTY]

    errors = []
    if not MIN_LENGTH <= len(password) <= MAX_LENGTH:
        errors.append(BAD_LENGTH)
    if not re.search(r"[a-z]", password):
        errors.append(NO_LOWER)
    if not re.search(r"[A-Z]", password):
        errors.append(NO_UPPER)
    if not re.search(r"[0-9]", password):
        errors.append(NO_DIGIT)
    if not re.search(r"[^a-zA-Z0-9]", password):
        errors.append(NO_SPECIAL)

    lowered = password.lower()
    if any(sequence in lowered for sequence in FORBIDDEN_SEQUENCES):
        errors.append(HAS_SEQUENCE)
    if is_simple(password):
        errors.append(TOO_SIMPLE)
    return errors


def is_strong(password: Optional[str]) -> bool:
    return not validation_errors(password)


def contains_personal_data(password: str, *values: Optional[str]) -> bool:
    """True when ``password`` embeds any 3+ character piece of ``values``.

    Values are split on non-alphanumeric characters, so ``maria.silva@x.com``
    contributes ``maria``, ``silva`` and ``com``.
    """
    lowered = password.lower()
    for value in values:
        for piece in re.split(r"[^0-9a-zA-ZÀ-ÿ]+", (value or "").lower()):
            if len(piece) >= 3 and piece in lowered:
                return True
    return False


class PasswordPolicyValidator:
    """Django password validator enforcing the policy above."""

    def validate(self, password: str, user=None) -> None:
        errors = validation_errors(password)
        if errors:
            raise ValidationError(
                [ValidationError(message, code="password_policy") for message in errors]
            )

    def get_help_text(self) -> str:
        return (
            f"Sua senha deve ter entre {MIN_LENGTH} e {MAX_LENGTH} caracteres, "
            "com letras maiúsculas e minúsculas, números e caracteres especiais."
        )
