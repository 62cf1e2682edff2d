"""Domain error taxonomy and the DRF exception handler.

Every business-rule violation raised by a service is a ``DomainError``
tagged with an ``ErrorKind``.  The kind is mapped to an HTTP status in
exactly one place (``STATUS_BY_KIND``) by ``api_exception_handler``, so
views never translate exceptions themselves.

Responses always use the standard envelope (see ``modules.core.responses``).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Iterable, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.views import set_rollback

from modules.core.responses import fail

logger = structlog.get_logger(__name__)


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

GENERIC_ERROR_MESSAGE = "Erro interno do servidor"
INVALID_DATA_MESSAGE = "Dados inválidos"


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


class DomainError(Exception):
    """Base class for errors raised by the service layer.

    ``message`` is the human-readable summary, ``errors`` the optional list
    of detailed violations (e.g. one entry per failed password rule).
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(
        self, message: Optional[str] = None, errors: Optional[Iterable[str]] = None
    ) -> None:
        self.message = message or self.default_message
        self.errors: List[str] = list(errors) if errors else [self.message]
        super().__init__(self.message)


class ValidationFailed(DomainError):
    kind = ErrorKind.VALIDATION
    default_message = INVALID_DATA_MESSAGE


class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Recurso não encontrado"


class Conflict(DomainError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflito com um registro existente"


class Unauthorized(DomainError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Não autorizado"


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _pydantic_messages(exc: PydanticValidationError) -> List[str]:
    """Render pydantic errors as ``"field: message"`` strings."""
    messages = []
    for error in exc.errors():
        if error["type"] == "value_error":
            text = str(error["ctx"]["error"])
        else:
            text = error["msg"]
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {text}" if location else text)
    return messages


def _flatten_detail(data: Any, prefix: str = "") -> Iterable[str]:
    """Walk DRF's nested ``response.data`` and yield flat messages."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield from _flatten_detail(value, prefix if key == "detail" else key)
    elif isinstance(data, (list, tuple)):
        for item in data:
            yield from _flatten_detail(item, prefix)
    else:
        yield f"{prefix}: {data}" if prefix else str(data)


# ---------------------------------------------------------------------------
# DRF hook
# ---------------------------------------------------------------------------


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """Translate any exception raised by a view into the response envelope."""
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, DomainError):
        set_rollback()
        logger.info(
            "api.domain_error",
            view=view_name,
            kind=str(exc.kind),
            error_message=exc.message,
        )
        return Response(fail(exc.message, exc.errors), status=STATUS_BY_KIND[exc.kind])

    if isinstance(exc, PydanticValidationError):
        set_rollback()
        errors = _pydantic_messages(exc)
        logger.info("api.validation_error", view=view_name, errors=len(errors))
        return Response(
            fail(INVALID_DATA_MESSAGE, errors), status=status.HTTP_400_BAD_REQUEST
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.error("api.unhandled_error", view=view_name, exc_info=exc)
        return Response(
            fail(GENERIC_ERROR_MESSAGE, [GENERIC_ERROR_MESSAGE]),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = response.data
    if isinstance(data, dict) and "detail" in data:
        message = str(data["detail"])
    else:
        message = INVALID_DATA_MESSAGE
    response.data = fail(message, list(_flatten_detail(data)))
    return response
