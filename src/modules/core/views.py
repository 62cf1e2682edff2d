import time
from typing import Any, Dict

import structlog
from django.core.management import call_command
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response

from modules.core.responses import ok
from modules.users.views import build_user_service

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    # Check database
    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_db_failure")

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def startup_init(request: Request) -> Response:
    """Apply pending migrations and seed the administrative account.

    Safe to call repeatedly: migrations are no-ops once applied and the
    admin account is only created when missing.
    """
    call_command("migrate", interactive=False, verbosity=0)
    admin, created = build_user_service().ensure_admin()
    logger.info("startup_init_completed", admin_created=created)
    return Response(
        ok(
            {"migrated": True, "admin_created": created, "admin_email": admin.email},
            "Inicialização concluída",
        )
    )
