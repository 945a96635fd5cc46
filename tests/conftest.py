# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime
from typing import Any

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dbright_site.api.dependencies import (
    get_authenticator,
    get_notifier,
    get_store,
)
from dbright_site.core.security import hash_password
from dbright_site.core.settings import Settings
from dbright_site.db.session import drop_tables
from dbright_site.main import app as fastapi_app
from dbright_site.services.auth import SessionAuthenticator
from dbright_site.services.notifications import ContactNotifier
from dbright_site.services.rate_limiter import LoginRateLimiter
from dbright_site.services.store import MessageStore, NewMessage

TEST_DB_URL = "sqlite://"
ADMIN_USERNAME = "operator"
ADMIN_PASSWORD = "correct horse battery staple"
_ADMIN_PASSWORD_HASH = hash_password(ADMIN_PASSWORD)


class FakeClock:
    """Manually advanced wall clock in epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def store_now() -> datetime:
    """Fixed 'now' for store aggregates: 2025-03-10 12:00 JST."""
    return datetime(2025, 3, 10, 3, 0, tzinfo=UTC)


@pytest.fixture()
def store(session_factory: sessionmaker[Session]) -> MessageStore:
    store = MessageStore(session_factory, timezone_name="Asia/Tokyo")
    store.ensure_schema()
    return store


@pytest.fixture()
def make_message(store: MessageStore) -> Callable[..., int]:
    """Insert a message and return its id."""

    def _make(name: str = "Test Sender", email: str = "sender@example.com", **fields: Any) -> int:
        result = store.insert(NewMessage(name=name, email=email, **fields))
        assert result.success, result.error
        return result.data["id"]

    return _make


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def rate_limiter(fake_clock: FakeClock) -> LoginRateLimiter:
    return LoginRateLimiter(clock=fake_clock)


@pytest.fixture(scope="session")
def admin_credentials() -> dict[str, str]:
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Settings with known operator credentials and mail disabled."""
    return Settings(
        _env_file=None,
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD_HASH=_ADMIN_PASSWORD_HASH,
        SESSION_SECRET="test-session-secret",
        NOTIFY_ENABLED=False,
    )


@pytest.fixture()
def authenticator(test_settings: Settings, rate_limiter: LoginRateLimiter) -> SessionAuthenticator:
    return SessionAuthenticator(test_settings, rate_limiter)


@pytest.fixture()
def notifier(test_settings: Settings) -> ContactNotifier:
    return ContactNotifier(test_settings)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_service_dependencies(
    app: FastAPI,
    store: MessageStore,
    authenticator: SessionAuthenticator,
    notifier: ContactNotifier,
) -> Iterator[None]:
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_authenticator] = lambda: authenticator
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    # https so the Secure session cookie is sent back
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture()
def admin_client(client: TestClient) -> TestClient:
    """A client holding a valid operator session cookie."""
    response = client.post(
        "/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client
