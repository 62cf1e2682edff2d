"""Unit tests for AuditService.

Covers:
- recording: one row per changed field, shared timestamp, no-op
  suppression, request context, failure isolation.
- queries: delegation to the repository and CPF handling.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from modules.audit.dtos import AuditContext
from modules.audit.models import AuditLog, EntityType
from modules.audit.services import CREATED, AuditService, as_text
from modules.core.exceptions import ValidationFailed
from modules.core.pagination import PageRequest

pytestmark = pytest.mark.unit

USER_ID = uuid.uuid4()


@pytest.fixture()
def mock_repo():
    repo = MagicMock()
    repo.add_many.side_effect = lambda entries: list(entries)
    return repo


@pytest.fixture()
def service(mock_repo):
    return AuditService(repository=mock_repo)


class TestAsText:
    def test_values(self):
        assert as_text(None) is None
        assert as_text(True) == "True"
        assert as_text(42) == "42"

    def test_datetime_is_iso(self):
        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert as_text(value) == "2024-01-02T03:04:05+00:00"


class TestLogChanges:
    def test_one_row_per_changed_field(self, service, mock_repo):
        entries = service.log_changes(
            USER_ID,
            EntityType.USER,
            USER_ID,
            {"first_name": ("Maria", "Mariana"), "phone": ("11987654321", "11912345678")},
        )
        assert [entry.field_name for entry in entries] == ["first_name", "phone"]
        assert entries[0].old_value == "Maria"
        assert entries[0].new_value == "Mariana"
        assert entries[0].changed_at == entries[1].changed_at
        mock_repo.add_many.assert_called_once()

    def test_unchanged_values_are_suppressed(self, service, mock_repo):
        entries = service.log_changes(
            USER_ID,
            EntityType.USER,
            USER_ID,
            {"is_active": (True, True), "complement": (None, None), "city": ("A", "B")},
        )
        assert [entry.field_name for entry in entries] == ["city"]

    def test_nothing_to_record_skips_the_write(self, service, mock_repo):
        assert service.log_changes(USER_ID, EntityType.USER, USER_ID, {"x": (1, 1)}) == []
        mock_repo.add_many.assert_not_called()

    def test_context_is_recorded(self, service):
        actor = uuid.uuid4()
        context = AuditContext(actor_id=actor, ip_address="10.0.0.1", user_agent="pytest")
        entry = service.log_change(
            USER_ID, EntityType.USER, USER_ID, CREATED, None, "maria@example.com", context
        )
        assert isinstance(entry, AuditLog)
        assert entry.changed_by == actor
        assert entry.ip_address == "10.0.0.1"
        assert entry.user_agent == "pytest"
        assert entry.old_value is None

    def test_write_failure_is_swallowed(self, service, mock_repo):
        mock_repo.add_many.side_effect = RuntimeError("database down")
        result = service.log_change(
            USER_ID, EntityType.ADDRESS, uuid.uuid4(), "city", "A", "B"
        )
        assert result is None


class TestQueries:
    def test_get_by_user_paginates_repository_result(self, service, mock_repo):
        queryset = MagicMock()
        queryset.count.return_value = 3
        queryset.__getitem__.return_value = ["a", "b"]
        mock_repo.for_user.return_value = queryset

        page = service.get_by_user(USER_ID, PageRequest(page=1, page_size=2))

        mock_repo.for_user.assert_called_once_with(USER_ID)
        assert page.items == ["a", "b"]
        assert page.total_count == 3
        assert page.total_pages == 2

    def test_get_by_cpf_cleans_input(self, service, mock_repo):
        queryset = MagicMock()
        queryset.count.return_value = 0
        queryset.__getitem__.return_value = []
        mock_repo.for_cpf.return_value = queryset

        service.get_by_cpf("598.601.842-75", PageRequest())

        mock_repo.for_cpf.assert_called_once_with("59860184275")

    def test_get_by_cpf_requires_digits(self, service):
        with pytest.raises(ValidationFailed) as exc_info:
            service.get_by_cpf("  ", PageRequest())
        assert exc_info.value.errors == ["CPF não pode ser vazio"]

    def test_detach_user_delegates(self, service, mock_repo):
        mock_repo.detach_user.return_value = 4
        assert service.detach_user(USER_ID) == 4
