"""User API views.

Exposes the ``UserService`` via HTTP using DRF ViewSets.  Request bodies
are parsed into Pydantic DTOs; domain exceptions propagate to
``api_exception_handler``, which renders the response envelope.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.addresses.repositories.django_repository import AddressDjangoRepository
from modules.addresses.serializers import AddressSerializer
from modules.addresses.services import AddressService
from modules.audit.dtos import AuditContext
from modules.audit.repositories.django_repository import AuditLogDjangoRepository
from modules.audit.services import AuditService
from modules.core.pagination import PageRequest
from modules.core.responses import ok
from modules.core.routers import UUID_PATTERN
from modules.users.dtos import CreateUserDTO, UpdateUserDTO
from modules.users.models import User
from modules.users.repositories.django_repository import UserDjangoRepository
from modules.users.serializers import UserSerializer
from modules.users.services import UserService


def build_user_service() -> UserService:
    """Wire ``UserService`` with the Django ORM repositories."""
    audit = AuditService(repository=AuditLogDjangoRepository())
    return UserService(
        repository=UserDjangoRepository(),
        addresses=AddressService(repository=AddressDjangoRepository(), audit=audit),
        audit=audit,
    )


class UserViewSet(GenericViewSet):
    """ViewSet for the user directory.

    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_user_service()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/users

        ``search`` matches names, email and CPF digits; ``name``, ``email``
        and ``active`` narrow the result (see ``UserFilter``).
        """
        page = self._service.list_users(
            PageRequest.from_query(request.query_params),
            search=request.query_params.get("search"),
            filters=request.query_params,
        )
        data = page.to_dict(lambda items: UserSerializer(items, many=True).data)
        return Response(ok(data))

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/users/{pk}"""
        user = self._service.get_user(pk)
        return Response(ok(UserSerializer(user).data))

    @action(detail=True, methods=["get"])
    def addresses(self, request: Request, pk: str) -> Response:
        """GET /api/v1/users/{pk}/addresses"""
        addresses = self._service.list_addresses(pk)
        return Response(ok(AddressSerializer(addresses, many=True).data))

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/users"""
        dto = CreateUserDTO.model_validate(request.data)
        user = self._service.create_user(dto, AuditContext.from_request(request))
        return Response(
            ok(UserSerializer(user).data, "Usuário criado com sucesso"),
            status=status.HTTP_201_CREATED,
        )

    def update(self, request: Request, pk: str) -> Response:
        """PUT /api/v1/users/{pk}"""
        dto = UpdateUserDTO.model_validate(request.data)
        user = self._service.update_user(pk, dto, AuditContext.from_request(request))
        return Response(ok(UserSerializer(user).data, "Usuário atualizado com sucesso"))

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/users/{pk}

        Permanent removal; refused for the administrative account and for
        the requester's own account.
        """
        self._service.delete_user(
            pk, request.user.id, AuditContext.from_request(request)
        )
        return Response(ok(message="Usuário excluído permanentemente"))

    @action(detail=True, methods=["delete"])
    def deactivate(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/users/{pk}/deactivate"""
        user = self._service.deactivate_user(pk, AuditContext.from_request(request))
        return Response(ok(UserSerializer(user).data, "Usuário desativado com sucesso"))

    @action(detail=True, methods=["post"])
    def activate(self, request: Request, pk: str) -> Response:
        """POST /api/v1/users/{pk}/activate"""
        user = self._service.activate_user(pk, AuditContext.from_request(request))
        return Response(ok(UserSerializer(user).data, "Usuário ativado com sucesso"))
