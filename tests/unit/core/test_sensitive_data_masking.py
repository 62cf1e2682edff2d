import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_cpf_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "cpf": "598.601.842-75"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "598.601.842-75" not in result["cpf"]
        assert "***MASKED***" in result["cpf"]

    def test_bare_cpf_digits_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "detail": "cpf 59860184275 rejected"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "59860184275" not in result["detail"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='Str0ng!Pass'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "Str0ng!Pass" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "user.created", "email": "maria@example.com"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["email"] == "maria@example.com"
        assert result["event"] == "user.created"


class TestUserRepresentation:
    def test_str_masks_cpf(self):
        from modules.users.models import User

        user = User(first_name="Maria", last_name="Silva", cpf="59860184275")
        assert str(user) == "Maria Silva (CPF: ***.***.***-75)"
