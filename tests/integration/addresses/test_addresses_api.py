"""Integration tests for the /api/v1/addresses endpoints.

Covers:
- listing and creating addresses of a user (active owner required);
- the single-primary rule end to end, including its audit rows;
- duplicate detection on create and update;
- last-address protection on delete.
"""

from __future__ import annotations

import uuid
from unittest.mock import patch

import pytest

from modules.addresses.models import Address
from modules.addresses.repositories.django_repository import AddressDjangoRepository
from modules.audit.models import AuditLog

pytestmark = pytest.mark.integration

ADDRESSES_URL = "/api/v1/addresses"


def _payload(**overrides):
    data = {
        "street": "Rua XV de Novembro",
        "number": "300",
        "neighborhood": "Centro",
        "city": "Curitiba",
        "state": "PR",
        "zip_code": "80020-310",
    }
    data.update(overrides)
    return data


def _primary_ids(user):
    return list(user.addresses.filter(is_primary=True).values_list("id", flat=True))


class TestListForUser:
    def test_primary_first(self, auth_client, user):
        Address.objects.create(
            user=user, street="Rua Secundária", city="Santos", state="SP", zip_code="11010-000"
        )
        response = auth_client.get(f"{ADDRESSES_URL}/users/{user.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["is_primary"] for item in data] == [True, False]
        assert data[0]["user_id"] == str(user.id)

    def test_unknown_user(self, auth_client):
        response = auth_client.get(f"{ADDRESSES_URL}/users/{uuid.uuid4()}")
        assert response.status_code == 404


class TestCreate:
    def test_creates_secondary_address(self, auth_client, user):
        response = auth_client.post(
            f"{ADDRESSES_URL}/users/{user.id}", _payload(), format="json"
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["country"] == "Brasil"
        assert data["is_primary"] is False
        assert user.addresses.count() == 2

    def test_inactive_owner_is_404(self, auth_client, make_user):
        inactive = make_user(email="inativa@example.com", cpf="39053344705", is_active=False)
        response = auth_client.post(
            f"{ADDRESSES_URL}/users/{inactive.id}", _payload(), format="json"
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Usuário não encontrado ou inativo"

    def test_duplicate_is_409(self, auth_client, user):
        response = auth_client.post(
            f"{ADDRESSES_URL}/users/{user.id}",
            _payload(
                street=" RUA DAS FLORES",
                number="100",
                neighborhood="centro",
                city="são paulo",
                state="sp",
                zip_code="01234-567",
            ),
            format="json",
        )
        assert response.status_code == 409

    def test_validation_errors(self, auth_client, user):
        response = auth_client.post(
            f"{ADDRESSES_URL}/users/{user.id}",
            _payload(state="Paraná", zip_code="800"),
            format="json",
        )
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert any(error.startswith("state:") for error in errors)
        assert any(error.startswith("zip_code:") for error in errors)


class TestPrimaryFlip:
    def test_new_primary_demotes_previous_one(self, auth_client, user):
        previous = user.addresses.get()

        response = auth_client.post(
            f"{ADDRESSES_URL}/users/{user.id}", _payload(is_primary=True), format="json"
        )

        new_id = uuid.UUID(response.json()["data"]["id"])
        assert _primary_ids(user) == [new_id]
        demotion = AuditLog.objects.get(entity_id=previous.id, field_name="is_primary")
        assert (demotion.old_value, demotion.new_value) == ("True", "False")

    def test_set_primary(self, auth_client, user):
        previous = user.addresses.get()
        other = Address.objects.create(
            user=user, street="Rua Secundária", city="Santos", state="SP", zip_code="11010-000"
        )

        response = auth_client.post(f"{ADDRESSES_URL}/{other.id}/set-primary")

        assert response.status_code == 200
        assert _primary_ids(user) == [other.id]
        rows = AuditLog.objects.filter(field_name="is_primary")
        assert {(row.entity_id, row.new_value) for row in rows} == {
            (previous.id, "False"),
            (other.id, "True"),
        }

    def test_update_to_primary(self, auth_client, user):
        other = Address.objects.create(
            user=user, street="Rua Secundária", city="Santos", state="SP", zip_code="11010-000"
        )
        response = auth_client.put(
            f"{ADDRESSES_URL}/{other.id}", {"is_primary": True}, format="json"
        )
        assert response.status_code == 200
        assert _primary_ids(user) == [other.id]

    def test_primary_constraint_violation_is_409(self, auth_client, user):
        previous = user.addresses.get()

        # Another writer promoted an address after the demotion step.
        with patch.object(AddressDjangoRepository, "demote_primaries", return_value=[]):
            response = auth_client.post(
                f"{ADDRESSES_URL}/users/{user.id}", _payload(is_primary=True), format="json"
            )

        assert response.status_code == 409
        assert response.json()["success"] is False
        assert _primary_ids(user) == [previous.id]
        assert user.addresses.count() == 1


class TestUpdate:
    def test_partial_update(self, auth_client, user):
        address = user.addresses.get()
        response = auth_client.put(
            f"{ADDRESSES_URL}/{address.id}",
            {"complement": "Apto 12", "state": "sp"},
            format="json",
        )
        assert response.status_code == 200
        address.refresh_from_db()
        assert address.complement == "Apto 12"
        rows = AuditLog.objects.filter(entity_id=address.id)
        assert list(rows.values_list("field_name", flat=True)) == ["complement"]

    def test_update_into_duplicate_is_409(self, auth_client, user):
        original = user.addresses.get()
        other = Address.objects.create(
            user=user, street="Rua Secundária", city="Santos", state="SP", zip_code="11010-000"
        )
        response = auth_client.put(
            f"{ADDRESSES_URL}/{other.id}",
            {
                "street": original.street,
                "number": original.number,
                "neighborhood": original.neighborhood,
                "city": original.city,
                "zip_code": original.zip_code,
            },
            format="json",
        )
        assert response.status_code == 409

    def test_unknown_address(self, auth_client):
        response = auth_client.get(f"{ADDRESSES_URL}/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Endereço não encontrado"


class TestDelete:
    def test_last_address_is_protected(self, auth_client, user):
        address = user.addresses.get()
        response = auth_client.delete(f"{ADDRESSES_URL}/{address.id}")
        assert response.status_code == 400
        assert response.json()["message"] == "Cada usuário deve ter pelo menos um endereço"
        assert Address.objects.filter(id=address.id).exists()

    def test_delete_secondary(self, auth_client, user):
        other = Address.objects.create(
            user=user, street="Rua Secundária", city="Santos", state="SP", zip_code="11010-000"
        )
        response = auth_client.delete(f"{ADDRESSES_URL}/{other.id}")
        assert response.status_code == 200
        assert user.addresses.count() == 1
        deleted = AuditLog.objects.get(entity_id=other.id, field_name="Deleted")
        assert deleted.old_value == "Rua Secundária - Santos/SP"
