import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger()


def client_ip(request: HttpRequest) -> str | None:
    """Best-effort client address (first hop of X-Forwarded-For, else REMOTE_ADDR)."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()[:45] or None
    return request.META.get("REMOTE_ADDR")


class CorrelationIdMiddleware:
    """Tags every request with a correlation id and logs its lifecycle.

    The id comes from the ``X-Request-ID`` header or is a fresh UUID4.  It is
    bound into structlog's contextvars (so every log line of the request
    carries it) and echoed back in the ``X-Request-ID`` response header,
    error envelopes included.  ``request_finished`` reports the status code
    and the elapsed time in milliseconds.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        logger.info(
            "request_started",
            method=request.method,
            path=request.get_full_path(),
            client_ip=client_ip(request),
        )

        start = time.monotonic()
        response = self.get_response(request)

        logger.info(
            "request_finished",
            method=request.method,
            path=request.get_full_path(),
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )

        response["X-Request-ID"] = cid
        return response
