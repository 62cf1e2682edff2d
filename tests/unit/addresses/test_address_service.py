"""Unit tests for AddressService.

Covers:
- create_address: owner checks, duplicate guard, primary demotion, audit.
- update_address: merged duplicate check, diff, primary flip.
- delete_address: last-address protection.
- set_primary: demote others then promote.
"""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock, call

import pytest
from django.db import IntegrityError

from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO
from modules.addresses.exceptions import (
    AddressConflict,
    AddressNotFound,
    AddressOwnerUnavailable,
    DuplicateAddress,
    LastAddressRequired,
)
from modules.addresses.models import Address
from modules.addresses.services import AddressService
from modules.audit.models import EntityType
from modules.audit.services import CREATED, DELETED
from modules.users.models import User

pytestmark = pytest.mark.unit


@pytest.fixture()
def owner():
    return User(
        first_name="Maria",
        last_name="Silva",
        cpf="59860184275",
        email="maria@example.com",
        phone="11987654321",
        is_active=True,
    )


@pytest.fixture()
def mock_repo(owner):
    repo = MagicMock()
    repo.lock_owner.return_value = owner
    repo.get_owner.return_value = owner
    repo.list_for_user.return_value = []
    repo.demote_primaries.return_value = []
    repo.save.side_effect = lambda address: address
    return repo


@pytest.fixture()
def audit():
    return MagicMock()


@pytest.fixture()
def service(mock_repo, audit):
    return AddressService(repository=mock_repo, audit=audit)


def _address(owner, **overrides) -> Address:
    defaults = {
        "street": "Rua das Flores",
        "number": "100",
        "city": "São Paulo",
        "state": "SP",
        "zip_code": "01234-567",
        "is_primary": False,
    }
    defaults.update(overrides)
    return Address(user=owner, **defaults)


def _create_dto(**overrides) -> CreateAddressDTO:
    data = {
        "street": "Avenida Brasil",
        "number": "500",
        "city": "Rio de Janeiro",
        "state": "RJ",
        "zip_code": "20040-002",
    }
    data.update(overrides)
    return CreateAddressDTO.model_validate(data)


class TestListForUser:
    def test_unknown_user(self, service, mock_repo):
        mock_repo.get_owner.return_value = None
        with pytest.raises(AddressOwnerUnavailable):
            service.list_for_user(uuid.uuid4())

    def test_delegates(self, service, mock_repo, owner):
        mock_repo.list_for_user.return_value = ["a"]
        assert service.list_for_user(owner.id) == ["a"]


class TestCreateAddress:
    def test_happy_path(self, service, mock_repo, audit, owner):
        address = service.create_address(owner.id, _create_dto())

        assert address.user is owner
        assert address.country == "Brasil"
        mock_repo.demote_primaries.assert_not_called()
        audit.log_change.assert_called_once_with(
            owner.id,
            EntityType.ADDRESS,
            address.id,
            CREATED,
            None,
            "Avenida Brasil, 500 - Rio de Janeiro/RJ",
            None,
        )

    def test_missing_owner(self, service, mock_repo):
        mock_repo.lock_owner.return_value = None
        with pytest.raises(AddressOwnerUnavailable):
            service.create_address(uuid.uuid4(), _create_dto())

    def test_inactive_owner(self, service, owner, mock_repo):
        owner.is_active = False
        with pytest.raises(AddressOwnerUnavailable):
            service.create_address(owner.id, _create_dto())
        mock_repo.save.assert_not_called()

    def test_duplicate_is_rejected(self, service, mock_repo, owner):
        mock_repo.list_for_user.return_value = [
            _address(
                owner,
                street="avenida brasil",
                number="500",
                city="RIO DE JANEIRO",
                state="RJ",
                zip_code="20040-002",
            )
        ]
        with pytest.raises(DuplicateAddress):
            service.create_address(owner.id, _create_dto())
        mock_repo.save.assert_not_called()

    def test_primary_demotes_previous_primary(self, service, mock_repo, audit, owner):
        previous_id = uuid.uuid4()
        mock_repo.demote_primaries.return_value = [previous_id]

        address = service.create_address(owner.id, _create_dto(is_primary=True))

        assert address.is_primary is True
        mock_repo.demote_primaries.assert_called_once_with(owner.id, None)
        assert audit.log_change.call_args_list[0] == call(
            owner.id, EntityType.ADDRESS, previous_id, "is_primary", True, False, None
        )

    def test_constraint_violation_is_conflict(self, service, mock_repo, audit, owner):
        mock_repo.save.side_effect = IntegrityError("addresses_single_primary_per_user")

        with pytest.raises(AddressConflict):
            service.create_address(owner.id, _create_dto(is_primary=True))
        audit.log_change.assert_not_called()


class TestUpdateAddress:
    def test_records_diff(self, service, mock_repo, audit, owner):
        address = _address(owner)
        mock_repo.get_by_id.return_value = address

        service.update_address(address.id, UpdateAddressDTO(city="Campinas", number="100"))

        assert address.city == "Campinas"
        changes = audit.log_changes.call_args.args[3]
        assert changes == {"city": ("São Paulo", "Campinas")}

    def test_merged_result_duplicate(self, service, mock_repo, owner):
        address = _address(owner)
        other = _address(owner, number="200")
        mock_repo.get_by_id.return_value = address
        mock_repo.list_for_user.return_value = [address, other]

        with pytest.raises(DuplicateAddress):
            service.update_address(address.id, UpdateAddressDTO(number="200"))

    def test_unchanged_values_do_not_collide_with_itself(self, service, mock_repo, audit, owner):
        address = _address(owner)
        mock_repo.get_by_id.return_value = address
        mock_repo.list_for_user.return_value = [address]

        service.update_address(address.id, UpdateAddressDTO(street="Rua das Flores"))

        mock_repo.save.assert_not_called()
        audit.log_changes.assert_not_called()

    def test_promotion_demotes_others(self, service, mock_repo, audit, owner):
        address = _address(owner)
        mock_repo.get_by_id.return_value = address

        service.update_address(address.id, UpdateAddressDTO(is_primary=True))

        mock_repo.demote_primaries.assert_called_once_with(owner.id, address.id)
        assert address.is_primary is True
        assert audit.log_changes.call_args.args[3] == {"is_primary": (False, True)}

    def test_not_found(self, service, mock_repo):
        mock_repo.get_by_id.return_value = None
        with pytest.raises(AddressNotFound):
            service.update_address(uuid.uuid4(), UpdateAddressDTO(city="Campinas"))


class TestDeleteAddress:
    def test_last_address_is_protected(self, service, mock_repo, owner):
        address = _address(owner)
        mock_repo.get_by_id.return_value = address
        mock_repo.count_for_user.return_value = 1

        with pytest.raises(LastAddressRequired):
            service.delete_address(address.id)
        mock_repo.delete.assert_not_called()

    def test_deletes_and_audits(self, service, mock_repo, audit, owner):
        address = _address(owner)
        mock_repo.get_by_id.return_value = address
        mock_repo.count_for_user.return_value = 2

        service.delete_address(address.id)

        mock_repo.delete.assert_called_once_with(address.id)
        audit.log_change.assert_called_once_with(
            owner.id,
            EntityType.ADDRESS,
            address.id,
            DELETED,
            "Rua das Flores, 100 - São Paulo/SP",
            None,
            None,
        )


class TestSetPrimary:
    def test_promotes_after_demoting(self, service, mock_repo, audit, owner):
        address = _address(owner)
        other_id = uuid.uuid4()
        mock_repo.get_by_id.return_value = address
        mock_repo.demote_primaries.return_value = [other_id]

        service.set_primary(address.id)

        assert address.is_primary is True
        assert [c.args[2] for c in audit.log_change.call_args_list] == [other_id, address.id]

    def test_already_primary_writes_nothing(self, service, mock_repo, audit, owner):
        address = _address(owner, is_primary=True)
        mock_repo.get_by_id.return_value = address

        service.set_primary(address.id)

        mock_repo.save.assert_not_called()
        audit.log_change.assert_not_called()
