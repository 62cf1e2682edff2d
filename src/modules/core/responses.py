"""Uniform API response envelope.

Every endpoint (success or failure) answers with::

    {"success": bool, "message": str, "data": ..., "errors": [...], "timestamp": iso}
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from django.utils import timezone


def envelope(
    success: bool,
    message: str = "",
    data: Any = None,
    errors: Optional[Iterable[str]] = None,
) -> dict:
    return {
        "success": success,
        "message": message,
        "data": data,
        "errors": list(errors or []),
        "timestamp": timezone.now().isoformat(),
    }


def ok(data: Any = None, message: str = "Operação realizada com sucesso") -> dict:
    return envelope(True, message, data)


def fail(message: str, errors: Optional[Iterable[str]] = None) -> dict:
    return envelope(False, message, None, errors)
