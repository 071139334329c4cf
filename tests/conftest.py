import itertools
import os
import tempfile

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "bookstore_test.db")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

import fakeredis
import pytest
from fastapi.testclient import TestClient

from bookstore.api.deps import get_payment_gateway, get_rate_limiter
from bookstore.data.database import Base, SessionLocal, engine
from bookstore.domain.enums import Role
from bookstore.domain.schemas import RegisterIn
from bookstore.main import app
from bookstore.services.auth_service import AuthService
from bookstore.services.rate_limiter import RateLimiter

PASSWORD = "Secret123"

_emails = itertools.count(1)


class FixedGateway:
    """Payment gateway with a predetermined answer."""

    def __init__(self, approve: bool = True):
        self.approve = approve

    def charge(self, payment) -> bool:
        return self.approve


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def limiter():
    return RateLimiter(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def gateway():
    return FixedGateway(approve=True)


@pytest.fixture
def client(limiter, gateway):
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_account():
    """
    Creates an account straight through the service (no HTTP, no rate limit).
    Returns id (profile id), auth_id, email, token and ready-made headers.
    """

    def _make(role: Role = Role.USER, name: str = "Test User", email: str | None = None, **extra):
        email = email or f"{role.value}{next(_emails)}@mail.com"
        session = SessionLocal()
        try:
            result = AuthService(session).register(
                RegisterIn(email=email, password=PASSWORD, name=name, role=role, **extra)
            )
        finally:
            session.close()

        profile = result["profile"]
        return {
            "id": profile.id,
            "auth_id": profile.auth_id,
            "email": email,
            "token": result["token"],
            "headers": {"Authorization": f"Bearer {result['token']}"},
        }

    return _make


@pytest.fixture
def admin(make_account):
    return make_account(Role.ADMIN, name="Admin")


@pytest.fixture
def user(make_account):
    return make_account(Role.USER, name="Alice")


@pytest.fixture
def other_user(make_account):
    return make_account(Role.USER, name="Bob")


@pytest.fixture
def make_book(client, admin):
    def _make(title="Clean Code", price="100000", stock=50, **extra):
        body = {"title": title, "price": price, "stock_quantity": stock, **extra}
        res = client.post("/api/books/", json=body, headers=admin["headers"])
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _make


@pytest.fixture
def make_address(client):
    def _make(owner, city="Ha Noi", ward="Ba Dinh", specific_address="12 Kim Ma"):
        body = {"user_id": owner["id"], "city": city, "ward": ward, "specific_address": specific_address}
        res = client.post("/api/addresses/", json=body, headers=owner["headers"])
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _make


@pytest.fixture
def place_order(client, make_address):
    def _place(owner, items, address=None, phone="0901234567"):
        address = address or make_address(owner)
        body = {
            "user_id": owner["id"],
            "address_id": address["id"],
            "phone": phone,
            "items": [{"book_id": book_id, "quantity": qty} for book_id, qty in items],
        }
        return client.post("/api/orders/", json=body, headers=owner["headers"])

    return _place
