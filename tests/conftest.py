"""
Pytest configuration and fixtures.
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coingift.common.deps import get_clock
from coingift.core.config import settings
from coingift.core.security import get_password_hash
from coingift.db.base_class import Base
from coingift.db.session import get_db
from coingift.main import app
from coingift.models import conversation, gift  # noqa: F401

ADMIN_PASSWORD = "s3cret-admin-pass"


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="session", autouse=True)
def admin_password_hash():
    original = settings.ADMIN_PASSWORD_HASH
    settings.ADMIN_PASSWORD_HASH = get_password_hash(ADMIN_PASSWORD)
    yield settings.ADMIN_PASSWORD_HASH
    settings.ADMIN_PASSWORD_HASH = original


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/v1/auth/token",
        data={"username": settings.ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def make_gift(client, **overrides):
    payload = {
        "amount": 10000,
        "senderName": "A",
        "senderPhone": "010-1111-2222",
        "receiverName": "B",
        "receiverPhone": "010-3333-4444",
        "message": "생일 축하해",
    }
    payload.update(overrides)
    response = client.post("/api/v1/gifts", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def pay_gift(client, created):
    payment = client.post(
        "/api/v1/payments",
        json={"giftId": created["id"], "amount": created["amount"], "method": "card"},
    ).json()
    response = client.post(f"/api/v1/payments/{payment['id']}/complete")
    assert response.status_code == 200, response.text
    return payment


@pytest.fixture
def gift_factory(client):
    return lambda **overrides: make_gift(client, **overrides)


@pytest.fixture
def paid_gift_factory(client):
    def factory(**overrides):
        created = make_gift(client, **overrides)
        pay_gift(client, created)
        return created

    return factory
