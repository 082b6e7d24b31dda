"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from customer_service.config import Settings
from customer_service.db import create_db_engine, init_db
from customer_service.ledger import AccountType
from customer_service.main import create_app
from customer_service.schemas import AccountIn, CustomerIn
from customer_service.security import CredentialService
from customer_service.service import AuthService, CustomerService
from customer_service.store import SQLCustomerStore

PASSWORD = "Password1234567890!"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """File-backed SQLite so several threads can share the database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'customers.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def store(settings) -> SQLCustomerStore:
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield SQLCustomerStore(engine)
    engine.dispose()


@pytest.fixture
def credentials(settings) -> CredentialService:
    return CredentialService(settings.jwt_secret, bcrypt_rounds=settings.bcrypt_rounds)


@pytest.fixture
def customer_service(store, credentials) -> CustomerService:
    return CustomerService(store, credentials, max_attempts=3)


@pytest.fixture
def auth_service(customer_service, credentials) -> AuthService:
    return AuthService(customer_service, credentials)


@pytest.fixture
def customer_payload() -> dict:
    return {
        "name": "customer's name",
        "email": "customer@gmail.com",
        "password": PASSWORD,
        "account": {"name": "Customer's account", "type": "Private", "balance": 0, "movements": []},
    }


@pytest.fixture
def customer_in() -> CustomerIn:
    return CustomerIn(
        name="customer's name",
        email="customer@gmail.com",
        password=PASSWORD,
        account=AccountIn(name="Customer's account", type=AccountType.PRIVATE),
    )


@pytest.fixture
def customer(customer_service, customer_in):
    return customer_service.create(customer_in)


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signed_up(client, customer_payload) -> dict:
    """Sign up through the API and return the customer body plus auth headers."""
    r = client.post("/auth/signup", json=customer_payload)
    assert r.status_code == 201
    login = client.post("/auth/login", json={"email": customer_payload["email"], "password": PASSWORD})
    assert login.status_code == 200
    return {
        "customer": r.json(),
        "headers": {"Authorization": f"Bearer {login.json()['access_token']}"},
    }
