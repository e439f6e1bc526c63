"""
tests/conftest.py -- Shared test fixtures for account service tests.

This module provides:
  - _make_test_store(): creates an isolated in-memory UserStore
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - user_store: module-scoped connected store
  - client: function-scoped TestClient (fresh cookie jar per test)
  - registered_user: a user created through POST /register

Design: each test module gets its own named shared-memory SQLite URI. UserStore
puts in-memory URLs on a StaticPool, so the sync route handlers TestClient runs
in its thread pool all see the same schema and rows.

DEBUG must be set before any core/auth import so get_settings() auto-generates
the token secrets instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any core/auth import so get_settings() can
# auto-generate token secrets in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from core.config import get_settings

PREFIX = get_settings().api_prefix


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create and connect a named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    store = UserStore(f"sqlite:///file:test_accounts_{db_suffix}?mode=memory&cache=shared&uri=true")
    store.connect()
    return store


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    The real lifespan would connect to Settings.database_url; tests hand the
    app an already-connected isolated store instead.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def user_store(request) -> Generator[UserStore, None, None]:
    """One isolated database per test module."""
    store = _make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    yield store
    store.close()


@pytest.fixture
def client(user_store: UserStore) -> Generator[TestClient, None, None]:
    """TestClient over the real app with the test store wired in.

    Function-scoped so every test starts with an empty cookie jar -- login
    responses set cookies that would otherwise leak into the next test.
    """
    app.router.lifespan_context = _patch_lifespan(user_store)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def new_user() -> dict:
    """A registration body with unique username and email."""
    tag = uuid.uuid4().hex[:8]
    return {
        "name": f"User {tag}",
        "username": f"user_{tag}",
        "email": f"{tag}@example.com",
        "password": f"pw-{tag}",
    }


@pytest.fixture
def registered_user(client: TestClient, new_user: dict) -> dict:
    """Register new_user through the API and return its body plus the assigned id."""
    resp = client.post(f"{PREFIX}/register", json=new_user)
    assert resp.status_code == 201, resp.text
    return {**new_user, "id": resp.json()["data"]["user"]["id"]}
