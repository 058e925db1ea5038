"""
tests/conftest.py -- Shared test fixtures for authapi.

This module provides:
  - issuer: TokenIssuer signed with a fixed test secret
  - store: function-scoped in-memory UserStore for unit tests
  - api_client: TestClient wired to an isolated store, plus a registered
    user and a valid bearer token for that user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
api_client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The real lifespan reads Settings from the environment; _patch_lifespan()
replaces it so no test needs a database server or a .env file.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# Settings are never built by the patched lifespan, but config tests and any
# accidental get_settings() call should see a complete environment.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/authapi_test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-characters-long")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from users.service import UserService

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"
# Minimum bcrypt cost keeps the suite fast; production default is 10.
TEST_ROUNDS = 4

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: UserStore, tokens: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and issuer into app.state exactly the way the real
    lifespan does, minus Settings and the startup ping.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.tokens = tokens
        app.state.auth_service = AuthService(store, tokens, bcrypt_rounds=TEST_ROUNDS)
        app.state.user_service = UserService(store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, expire_seconds=3600)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """Fresh in-memory store per test.

    Plain :memory: is fine here -- unit tests call the store from one thread.
    """
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture(scope="module")
def api_client(request, issuer: TokenIssuer) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    One TestClient and one database per test module. The user
    "Test Admin" <admin@example.com> / "testpass123" exists before the
    client starts; token is a valid bearer token for that user.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    store = _make_test_store(suffix)
    auth_service = AuthService(store, issuer, bcrypt_rounds=TEST_ROUNDS)
    user = auth_service.register("Test Admin", "admin@example.com", "testpass123")
    token = issuer.issue({"id": user.id, "email": user.email, "role": user.role})

    app.router.lifespan_context = _patch_lifespan(store, issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, user.id

    store.close()
