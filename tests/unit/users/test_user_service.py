"""Unit tests for UserService.

Collaborators (repository, address service, audit service) are mocks.

Covers:
- create_user: happy path, duplicate CPF, duplicate email, weak password,
  unique-constraint race.
- update_user: changes, email collision, password re-hash, no-op.
- activate/deactivate: idempotence.
- delete_user: protected accounts, cascade order.
- ensure_admin, get_user.
"""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest
from django.db import IntegrityError
from django.test import override_settings

from modules.audit.models import EntityType
from modules.audit.services import CREATED, DELETED
from modules.users.dtos import CreateUserDTO, UpdateUserDTO
from modules.users.exceptions import (
    ProtectedUser,
    UserAlreadyExists,
    UserNotFound,
    WeakPassword,
)
from modules.users.models import User
from modules.users.services import PASSWORD_CHANGED, UserService

pytestmark = pytest.mark.unit

VALID_CPF = "59860184275"
ADDRESS = {
    "street": "Rua das Flores",
    "city": "São Paulo",
    "state": "SP",
    "zip_code": "01234-567",
    "is_primary": True,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    repo = MagicMock()
    repo.cpf_taken.return_value = False
    repo.email_taken.return_value = False
    repo.save.side_effect = lambda user: user
    return repo


@pytest.fixture()
def addresses():
    return MagicMock()


@pytest.fixture()
def audit():
    return MagicMock()


@pytest.fixture()
def service(mock_repo, addresses, audit):
    return UserService(repository=mock_repo, addresses=addresses, audit=audit)


def _create_dto(**overrides) -> CreateUserDTO:
    data = {
        "first_name": "Maria",
        "last_name": "Silva",
        "cpf": VALID_CPF,
        "email": "maria@example.com",
        "phone": "11987654321",
        "password": "Str0ng!Pass",
        "confirm_password": "Str0ng!Pass",
        "addresses": [ADDRESS],
    }
    data.update(overrides)
    return CreateUserDTO.model_validate(data)


def _make_user(**overrides) -> User:
    defaults = {
        "first_name": "Maria",
        "last_name": "Silva",
        "cpf": VALID_CPF,
        "email": "maria@example.com",
        "phone": "11987654321",
        "is_active": True,
    }
    defaults.update(overrides)
    user = User(**defaults)
    user.set_password("Str0ng!Pass")
    return user


# ===========================================================================
# create_user
# ===========================================================================


class TestCreateUser:
    def test_happy_path(self, service, mock_repo, addresses, audit):
        mock_repo.get_with_addresses.side_effect = lambda user_id: "reloaded"

        result = service.create_user(_create_dto())

        saved = mock_repo.save.call_args.args[0]
        assert saved.cpf == VALID_CPF
        assert saved.is_active is True
        assert saved.check_password("Str0ng!Pass")
        assert saved.password != "Str0ng!Pass"
        addresses.add_to_user.assert_called_once()
        assert addresses.add_to_user.call_args.args[0] is saved
        audit.log_change.assert_called_once_with(
            saved.id, EntityType.USER, saved.id, CREATED, None, "maria@example.com", None
        )
        assert result == "reloaded"

    def test_duplicate_cpf(self, service, mock_repo):
        mock_repo.cpf_taken.return_value = True
        with pytest.raises(UserAlreadyExists) as exc_info:
            service.create_user(_create_dto())
        assert exc_info.value.message == "CPF já cadastrado"
        mock_repo.save.assert_not_called()

    def test_duplicate_email(self, service, mock_repo):
        mock_repo.email_taken.return_value = True
        with pytest.raises(UserAlreadyExists) as exc_info:
            service.create_user(_create_dto())
        assert exc_info.value.message == "E-mail já cadastrado"

    def test_weak_password_lists_every_failed_rule(self, service, mock_repo):
        dto = _create_dto(password="weakpass9", confirm_password="weakpass9")
        with pytest.raises(WeakPassword) as exc_info:
            service.create_user(dto)
        assert len(exc_info.value.errors) == 2
        mock_repo.save.assert_not_called()

    def test_unique_constraint_race_is_a_conflict(self, service, mock_repo):
        mock_repo.save.side_effect = IntegrityError("unique")
        with pytest.raises(UserAlreadyExists):
            service.create_user(_create_dto())


# ===========================================================================
# update_user
# ===========================================================================


class TestUpdateUser:
    def test_records_changed_fields(self, service, mock_repo, audit):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user

        service.update_user(
            user.id,
            UpdateUserDTO(first_name="Mariana", last_name="Silva", email="NOVA@example.com"),
        )

        assert user.first_name == "Mariana"
        assert user.email == "nova@example.com"
        assert user.updated_at is not None
        changes = audit.log_changes.call_args.args[3]
        assert changes == {
            "first_name": ("Maria", "Mariana"),
            "email": ("maria@example.com", "nova@example.com"),
        }

    def test_email_taken_by_other_user(self, service, mock_repo):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user
        mock_repo.email_taken.return_value = True

        with pytest.raises(UserAlreadyExists):
            service.update_user(user.id, UpdateUserDTO(email="outra@example.com"))
        mock_repo.email_taken.assert_called_once_with("outra@example.com", user.id)

    def test_password_is_rehashed_and_audited_without_value(self, service, mock_repo, audit):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user

        service.update_user(user.id, UpdateUserDTO(password="N3w!Secret"))

        assert user.check_password("N3w!Secret")
        changes = audit.log_changes.call_args.args[3]
        assert changes == {"password": (None, PASSWORD_CHANGED)}

    def test_weak_new_password(self, service, mock_repo):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user
        with pytest.raises(WeakPassword):
            service.update_user(user.id, UpdateUserDTO(password="fraca"))

    def test_noop_update_writes_nothing(self, service, mock_repo, audit):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user

        service.update_user(user.id, UpdateUserDTO(first_name="Maria"))

        mock_repo.save.assert_not_called()
        audit.log_changes.assert_not_called()
        assert user.updated_at is None

    def test_not_found(self, service, mock_repo):
        mock_repo.get_with_addresses.return_value = None
        with pytest.raises(UserNotFound):
            service.update_user("missing", UpdateUserDTO(first_name="Mariana"))


# ===========================================================================
# activate / deactivate
# ===========================================================================


class TestActiveFlag:
    def test_deactivate(self, service, mock_repo, audit):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user

        service.deactivate_user(user.id)

        assert user.is_active is False
        assert user.updated_at is not None
        audit.log_change.assert_called_once_with(
            user.id, EntityType.USER, user.id, "is_active", True, False, None
        )

    def test_deactivate_twice_is_a_noop(self, service, mock_repo, audit):
        user = _make_user(is_active=False)
        mock_repo.get_with_addresses.return_value = user

        service.deactivate_user(user.id)

        mock_repo.save.assert_not_called()
        audit.log_change.assert_not_called()
        assert user.updated_at is None

    def test_activate(self, service, mock_repo, audit):
        user = _make_user(is_active=False)
        mock_repo.get_with_addresses.return_value = user

        service.activate_user(user.id)

        assert user.is_active is True
        mock_repo.save.assert_called_once_with(user)


# ===========================================================================
# delete_user
# ===========================================================================


class TestDeleteUser:
    @override_settings(ADMIN_EMAIL="admin@cadplus.com.br")
    def test_admin_is_protected(self, service, mock_repo):
        admin = _make_user(email="admin@cadplus.com.br")
        mock_repo.get_with_addresses.return_value = admin

        with pytest.raises(ProtectedUser):
            service.delete_user(admin.id, requester_id=None)
        mock_repo.delete.assert_not_called()

    def test_self_delete_is_refused(self, service, mock_repo):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user

        with pytest.raises(ProtectedUser) as exc_info:
            service.delete_user(user.id, requester_id=str(user.id))
        assert "própria conta" in exc_info.value.message

    def test_removes_addresses_detaches_history_and_logs(
        self, service, mock_repo, addresses, audit
    ):
        user = _make_user()
        mock_repo.get_with_addresses.return_value = user
        manager = MagicMock()
        manager.attach_mock(addresses.remove_all_for_user, "remove_addresses")
        manager.attach_mock(audit.detach_user, "detach")
        manager.attach_mock(mock_repo.delete, "delete")

        service.delete_user(user.id, requester_id=None)

        assert manager.mock_calls == [
            call.remove_addresses(user.id),
            call.detach(user.id),
            call.delete(user.id),
        ]
        audit.log_change.assert_called_once_with(
            None, EntityType.USER, user.id, DELETED, "maria@example.com", None, None
        )


# ===========================================================================
# ensure_admin / queries
# ===========================================================================


class TestEnsureAdmin:
    def test_existing_admin_is_returned(self, service, mock_repo, addresses):
        admin = _make_user(email="admin@cadplus.com.br")
        mock_repo.get_by_email.return_value = admin

        assert service.ensure_admin() == (admin, False)
        mock_repo.save.assert_not_called()
        addresses.add_to_user.assert_not_called()

    @override_settings(
        ADMIN_EMAIL="Admin@CadPlus.com.br",
        ADMIN_PASSWORD="Cadplus#Admin2024",
        ADMIN_CPF="111.444.777-35",
    )
    def test_missing_admin_is_created(self, service, mock_repo, addresses):
        mock_repo.get_by_email.return_value = None

        admin, created = service.ensure_admin()

        assert created is True
        assert admin.email == "admin@cadplus.com.br"
        assert admin.cpf == "11144477735"
        assert admin.check_password("Cadplus#Admin2024")
        dto = addresses.add_to_user.call_args.args[1]
        assert dto.is_primary is True


class TestGetUser:
    def test_not_found(self, service, mock_repo):
        mock_repo.get_with_addresses.return_value = None
        with pytest.raises(UserNotFound):
            service.get_user("missing")

    def test_cpf_exists_cleans_input(self, service, mock_repo):
        service.cpf_exists("598.601.842-75")
        mock_repo.cpf_taken.assert_called_once_with(VALID_CPF, None)
