"""
tests/conftest.py -- Shared test fixtures for AuthGate unit and integration tests.

This module provides:
  - FakeClock / clock: a controllable time source for SessionStore expiry
  - hasher, user_store, session_store, service: in-memory component fixtures
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - client: TestClient over https://testserver so Secure cookies round-trip

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the TestClient fixture because it runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread. Unit fixtures call stores from the test thread only,
so plain :memory: is enough there.

Environment must be set before any api/ or core/ import: get_settings() is
cached on first use, and api/limiter.py and api/main.py read it at import.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before importing api/ -- Settings is read once at import time.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("SESSION_PURGE_INTERVAL_SECONDS", "3600")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.sessions import SessionStore
from auth.store import UserStore

# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable time source. advance() moves it forward without sleeping."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Cost 4 is bcrypt's minimum -- real hashes, fast tests.
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def session_store(clock: FakeClock) -> Generator[SessionStore, None, None]:
    store = SessionStore("sqlite:///:memory:", clock=clock)
    yield store
    store.close()


@pytest.fixture
def service(user_store: UserStore, session_store: SessionStore, hasher: PasswordHasher) -> AuthService:
    return AuthService(users=user_store, sessions=session_store, hasher=hasher)


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


def _make_test_stores() -> tuple[UserStore, SessionStore]:
    """Create isolated named shared-memory SQLite stores for one test.

    A fresh uuid per call keeps tests from seeing each other's users.
    """
    suffix = uuid.uuid4().hex
    users = UserStore(f"sqlite:///file:test_users_{suffix}?mode=memory&cache=shared&uri=true")
    sessions = SessionStore(f"sqlite:///file:test_sessions_{suffix}?mode=memory&cache=shared&uri=true")
    return users, sessions


def _patch_lifespan(users: UserStore, sessions: SessionStore, hasher: PasswordHasher):
    """Return an async context manager that replaces the real lifespan.

    No purge task: expiry is covered by the SessionStore unit tests.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = users
        app.state.session_store = sessions
        app.state.auth_service = AuthService(users=users, sessions=sessions, hasher=hasher)
        app.state.purge_task = None
        yield

    return test_lifespan


@pytest.fixture
def client(hasher: PasswordHasher) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app wired to fresh in-memory stores.

    base_url is https so the cookie jar stores and resends the Secure
    userid/session cookies exactly like a browser would.
    """
    users, sessions = _make_test_stores()
    app.router.lifespan_context = _patch_lifespan(users, sessions, hasher)

    with TestClient(app, base_url="https://testserver", raise_server_exceptions=True) as test_client:
        yield test_client

    users.close()
    sessions.close()

