"""Address API views.

Exposes the ``AddressService`` via HTTP.  Domain exceptions propagate to
``api_exception_handler``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO
from modules.addresses.models import Address
from modules.addresses.repositories.django_repository import AddressDjangoRepository
from modules.addresses.serializers import AddressSerializer
from modules.addresses.services import AddressService
from modules.audit.dtos import AuditContext
from modules.audit.repositories.django_repository import AuditLogDjangoRepository
from modules.audit.services import AuditService
from modules.core.responses import ok
from modules.core.routers import UUID_PATTERN


class AddressViewSet(GenericViewSet):
    """ViewSet for addresses, standalone or scoped to a user."""

    queryset = Address.objects.all()
    serializer_class = AddressSerializer
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AddressService(
            repository=AddressDjangoRepository(),
            audit=AuditService(repository=AuditLogDjangoRepository()),
        )

    @action(detail=False, methods=["get"], url_path=rf"users/(?P<user_id>{UUID_PATTERN})")
    def for_user(self, request: Request, user_id: str) -> Response:
        """GET /api/v1/addresses/users/{user_id}"""
        addresses = self._service.list_for_user(user_id)
        return Response(ok(AddressSerializer(addresses, many=True).data))

    @for_user.mapping.post
    def create_for_user(self, request: Request, user_id: str) -> Response:
        """POST /api/v1/addresses/users/{user_id}"""
        dto = CreateAddressDTO.model_validate(request.data)
        address = self._service.create_address(
            user_id, dto, AuditContext.from_request(request)
        )
        return Response(
            ok(AddressSerializer(address).data, "Endereço criado com sucesso"),
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/addresses/{pk}"""
        address = self._service.get_address(pk)
        return Response(ok(AddressSerializer(address).data))

    def update(self, request: Request, pk: str) -> Response:
        """PUT /api/v1/addresses/{pk}"""
        dto = UpdateAddressDTO.model_validate(request.data)
        address = self._service.update_address(
            pk, dto, AuditContext.from_request(request)
        )
        return Response(
            ok(AddressSerializer(address).data, "Endereço atualizado com sucesso")
        )

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/addresses/{pk}"""
        self._service.delete_address(pk, AuditContext.from_request(request))
        return Response(ok(message="Endereço excluído com sucesso"))

    @action(detail=True, methods=["post"], url_path="set-primary")
    def set_primary(self, request: Request, pk: str) -> Response:
        """POST /api/v1/addresses/{pk}/set-primary"""
        address = self._service.set_primary(pk, AuditContext.from_request(request))
        return Response(
            ok(AddressSerializer(address).data, "Endereço definido como principal")
        )
