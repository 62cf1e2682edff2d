"""CPF (Brazilian individual taxpayer id) helpers.

Check digits (both computed with mod 11, remainder < 2 maps to 0):
- digit 10: weights 10..2 over the first 9 digits;
- digit 11: weights 11..2 over the first 10 digits.

Sequences of 11 identical digits satisfy the formula but are rejected.
Stored CPFs are always the 11 bare digits (see ``clean``).
"""

from __future__ import annotations

import re

from validate_docbr import CPF

CPF_LENGTH = 11

_NON_DIGIT = re.compile(r"\D")


def clean(value: str | None) -> str:
    """Strip every non-digit character. ``None`` becomes ``""``."""
    return _NON_DIGIT.sub("", value or "")


def _check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid(value: str | None) -> bool:
    digits = clean(value)
    if len(digits) != CPF_LENGTH or len(set(digits)) == 1:
        return False
    return _check_digit(digits[:9]) == int(digits[9]) and _check_digit(
        digits[:10]
    ) == int(digits[10])


def format_cpf(value: str | None) -> str | None:
    """Render a valid CPF as ``###.###.###-##``; invalid input is returned as-is."""
    if not is_valid(value):
        return value
    d = clean(value)
    return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"


def generate() -> str:
    """Random valid CPF (bare digits) for fixtures and seed data."""
    return CPF().generate()


def mask(value: str | None) -> str:
    """Log/display-safe form: only the last two digits survive."""
    digits = clean(value)
    return f"***.***.***-{digits[-2:]}" if len(digits) == CPF_LENGTH else "***"
