import pytest

from rest_framework.test import APIClient

from modules.addresses.models import Address
from modules.users.models import User

VALID_CPF = "59860184275"
OTHER_CPF = "39053344705"
THIRD_CPF = "52998224725"
STRONG_PASSWORD = "Str0ng!Pass"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def make_user():
    """Factory persisting an active user with one primary address."""

    def _make(
        email="maria@example.com",
        cpf=VALID_CPF,
        first_name="Maria",
        last_name="Silva",
        password=STRONG_PASSWORD,
        is_active=True,
        with_address=True,
    ):
        user = User.objects.create_user(
            email,
            password,
            first_name=first_name,
            last_name=last_name,
            cpf=cpf,
            phone="11987654321",
            is_active=is_active,
        )
        if with_address:
            Address.objects.create(
                user=user,
                street="Rua das Flores",
                number="100",
                neighborhood="Centro",
                city="São Paulo",
                state="SP",
                zip_code="01234-567",
                is_primary=True,
            )
        return user

    return _make


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def auth_client(make_user):
    """APIClient force-authenticated as a dedicated operator account."""
    operator = make_user(
        email="operador@example.com",
        cpf=THIRD_CPF,
        first_name="Carlos",
        last_name="Operador",
    )
    client = APIClient()
    client.force_authenticate(user=operator)
    client.operator = operator
    return client
