"""
tests/conftest.py -- Shared test fixtures for the ISRS auth service.

This module provides:
  - engine / user_store / activity_store / service: isolated SQLite file
    databases under pytest's tmp_path, one per test
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - client: TestClient against the real FastAPI app using the test stores
  - register_and_login(): helper that drives the public endpoints

Design: a file-backed SQLite database per test (not :memory:) because
TestClient runs route handlers in a thread pool, and the concurrency tests
open several connections at once. WAL mode and foreign keys are enabled by
core.db.create_db_engine() exactly as in production.

Environment variables must be set before any auth/core import so
get_settings() sees them: DEBUG avoids the production SECRET_KEY check, a
fixed SECRET_KEY lets tests forge tokens signed with a different key, and
BCRYPT_ROUNDS=4 keeps hashing fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from audit.recorder import ActivityRecorder
from audit.store import ActivityStore
from auth.service import AuthService
from auth.store import UserStore
from core.db import create_db_engine

# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    eng = create_db_engine(f"sqlite:///{tmp_path / 'isrs_test.sqlite'}")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def activity_store(engine: Engine) -> ActivityStore:
    return ActivityStore(engine)


@pytest.fixture
def service(user_store: UserStore, activity_store: ActivityStore) -> AuthService:
    return AuthService(user_store, activity_store, ActivityRecorder(activity_store))


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, activity_store: ActivityStore, service: AuthService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see the
    isolated test database rather than the production one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.activity_store = activity_store
        app.state.auth_service = service
        yield

    return test_lifespan


@pytest.fixture
def client(user_store, activity_store, service) -> Generator[TestClient, None, None]:
    """TestClient that re-raises server exceptions (the normal case)."""
    app.router.lifespan_context = _patch_lifespan(user_store, activity_store, service)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def lenient_client(user_store, activity_store, service) -> Generator[TestClient, None, None]:
    """TestClient that returns the 500 response instead of re-raising.

    Starlette re-raises after the catch-all handler runs; tests that assert on
    the opaque 500 body need raise_server_exceptions=False.
    """
    app.router.lifespan_context = _patch_lifespan(user_store, activity_store, service)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def register_and_login(client: TestClient, name: str, email: str, password: str) -> tuple[int, str]:
    """Register an account through the API, log in, and return (user_id, token)."""
    resp = client.post("/api/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    user_id = resp.json()["userId"]
    resp = client.post("/api/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return user_id, resp.json()["token"]
