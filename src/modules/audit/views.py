"""Audit trail API views (read-only, paginated, newest first)."""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.audit.dtos import PeriodQuery
from modules.audit.models import AuditLog
from modules.audit.repositories.django_repository import AuditLogDjangoRepository
from modules.audit.serializers import AuditLogSerializer
from modules.audit.services import AuditService
from modules.core.pagination import Page, PageRequest
from modules.core.responses import ok
from modules.core.routers import UUID_PATTERN


class AuditViewSet(GenericViewSet):
    queryset = AuditLog.objects.all()
    serializer_class = AuditLogSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AuditService(repository=AuditLogDjangoRepository())

    def _page_request(self) -> PageRequest:
        return PageRequest.from_query(self.request.query_params)

    @staticmethod
    def _render(page: Page[AuditLog]) -> Response:
        data = page.to_dict(lambda items: AuditLogSerializer(items, many=True).data)
        return Response(ok(data))

    @action(detail=False, methods=["get"], url_path=r"cpf/(?P<cpf>[^/]+)")
    def by_cpf(self, request: Request, cpf: str) -> Response:
        """GET /api/v1/audit/cpf/{cpf}"""
        return self._render(self._service.get_by_cpf(cpf, self._page_request()))

    @action(detail=False, methods=["get"], url_path=rf"user/(?P<user_id>{UUID_PATTERN})")
    def by_user(self, request: Request, user_id: str) -> Response:
        """GET /api/v1/audit/user/{user_id}"""
        return self._render(self._service.get_by_user(user_id, self._page_request()))

    @action(
        detail=False,
        methods=["get"],
        url_path=rf"entity/(?P<entity_type>[A-Za-z]+)/(?P<entity_id>{UUID_PATTERN})",
    )
    def by_entity(self, request: Request, entity_type: str, entity_id: str) -> Response:
        """GET /api/v1/audit/entity/{entity_type}/{entity_id}"""
        page = self._service.get_by_entity(entity_type, entity_id, self._page_request())
        return self._render(page)

    @action(detail=False, methods=["get"])
    def period(self, request: Request) -> Response:
        """GET /api/v1/audit/period?start=...&end=..."""
        query = PeriodQuery.model_validate(
            {
                "start": request.query_params.get("start"),
                "end": request.query_params.get("end"),
            }
        )
        page = self._service.get_by_period(query.start, query.end, self._page_request())
        return self._render(page)

    @action(detail=False, methods=["get"], url_path=r"action/(?P<field_name>[^/]+)")
    def by_action(self, request: Request, field_name: str) -> Response:
        """GET /api/v1/audit/action/{field_name}"""
        return self._render(self._service.get_by_action(field_name, self._page_request()))
