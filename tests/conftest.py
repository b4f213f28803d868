"""
tests/conftest.py -- Shared test fixtures for TicketDesk.

This module provides:
  - store: a UserStore on a fresh SQLite file under tmp_path
  - roles: "admin" and "agent" roles seeded into that store
  - codec: a TokenCodec with a fixed test secret
  - make_user: factory that inserts a user and returns the stored User
  - api_client: TestClient wired to the same store and codec, plus an admin
    user and an access token for it

Design: each test gets its own database file, so tests that delete or rename
users cannot leak state into each other. A file (not ':memory:') is used
because TestClient runs sync route handlers in a thread pool and a plain
in-memory SQLite database is private to one connection.

DEBUG must be set before any api/core import so get_settings() can
auto-generate SECRET_KEY in dev mode instead of raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any api/core import -- api.main reads settings at
# import time to mount routers under BASE_API_URL.
os.environ.setdefault("DEBUG", "true")
os.environ["BASE_API_URL"] = "/api"

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Role, User
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenCodec, hash_password
from users.service import UserService

TEST_SECRET = "ticketdesk-test-secret-key-0123456789abcdef"

# Hashed once; every seeded user shares it.
_TEST_PASSWORD_HASH = hash_password("password123")


def make_codec(secret_key: str = TEST_SECRET) -> TokenCodec:
    return TokenCodec(secret_key, access_ttl=900, refresh_ttl=3600, login_ttl=600)


def _patch_lifespan(store: UserStore, codec: TokenCodec):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and codec into app.state so TestClient routes use the
    per-test database rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.auth_service = AuthService(store, codec)
        app.state.user_service = UserService(store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store(tmp_path) -> Generator[UserStore, None, None]:
    s = UserStore(f"sqlite:///{tmp_path / 'ticketdesk_test.db'}")
    yield s
    s.close()


@pytest.fixture
def roles(store: UserStore) -> dict[str, int]:
    """Seed two roles and return {name: id}."""
    return {
        "admin": store.create_role(Role(name="admin")),
        "agent": store.create_role(Role(name="agent")),
    }


@pytest.fixture
def make_user(store: UserStore, roles: dict[str, int]) -> Callable[..., User]:
    """Insert a user directly through the store and return it as read back."""

    def _make(
        email: str,
        first_name: str = "Test",
        last_name: str = "User",
        role: str = "agent",
    ) -> User:
        user_id = store.create_user(
            User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role_id=roles[role],
                password=_TEST_PASSWORD_HASH,
            )
        )
        return store.get_by_id(user_id)

    return _make


@pytest.fixture
def codec() -> TokenCodec:
    return make_codec()


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def api_client(
    store: UserStore,
    codec: TokenCodec,
    make_user: Callable[..., User],
) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, admin_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers, dependencies and exception handlers.
    token is a valid access token for the seeded admin user.
    """
    admin = make_user("admin@ticketdesk.test", first_name="Ada", last_name="Admin", role="admin")
    token = codec.issue_access_token(admin.id)

    app.router.lifespan_context = _patch_lifespan(store, codec)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, admin.id
