"""
tests/test_session_guard.py -- Integration tests for get_current_user via GET /me.

Coverage:
  - No token: 401 "token not found"
  - Bearer header and accessToken cookie both authenticate; header wins
  - Garbage, wrong-secret, and expired tokens: 401 "invalid token"
  - Token whose subject was deleted: 404 "user not found"
  - Response never carries password or refresh token
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auth.models import User
from auth.store import UserStore
from auth.tokens import generate_access_token, generate_refresh_token, hash_password
from core.config import get_settings

PREFIX = get_settings().api_prefix


def _token_for(user: dict) -> str:
    return generate_access_token(User(id=user["id"], name=user["name"], username=user["username"], email=user["email"]))


class TestGuardRejects:
    def test_no_token_returns_401(self, client: TestClient) -> None:
        resp = client.get(f"{PREFIX}/me")
        assert resp.status_code == 401
        assert resp.json()["message"] == "token not found"

    def test_garbage_token_returns_401(self, client: TestClient) -> None:
        resp = client.get(f"{PREFIX}/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "invalid token"

    def test_refresh_token_is_not_an_access_token(self, client: TestClient, registered_user: dict) -> None:
        """A refresh token is signed with the other secret and must not pass the guard."""
        refresh = generate_refresh_token(User(id=registered_user["id"], name="", username="", email=""))
        resp = client.get(f"{PREFIX}/me", headers={"Authorization": f"Bearer {refresh}"})
        assert resp.status_code == 401

    def test_expired_token_returns_401(
        self, client: TestClient, registered_user: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(get_settings(), "access_token_expire_seconds", -60)
        token = _token_for(registered_user)
        resp = client.get(f"{PREFIX}/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "invalid token"

    def test_deleted_user_returns_404(self, client: TestClient, user_store: UserStore) -> None:
        """A validly signed token whose subject no longer exists yields 404."""
        uid = user_store.create_user(
            User(name="Gone", username="gone_user", email="gone@example.com", password=hash_password("pw123456"))
        )
        token = _token_for({"id": uid, "name": "Gone", "username": "gone_user", "email": "gone@example.com"})
        assert user_store.delete_user(uid)

        resp = client.get(f"{PREFIX}/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.json()["message"] == "user not found"


class TestGuardAccepts:
    def test_bearer_header(self, client: TestClient, registered_user: dict) -> None:
        resp = client.get(f"{PREFIX}/me", headers={"Authorization": f"Bearer {_token_for(registered_user)}"})
        assert resp.status_code == 200, resp.text
        user = resp.json()["data"]["user"]
        assert user["id"] == registered_user["id"]
        assert set(user) == {"id", "name", "username", "email"}

    def test_cookie_fallback(self, client: TestClient, registered_user: dict) -> None:
        """After login the accessToken cookie alone authenticates."""
        client.post(
            f"{PREFIX}/login",
            json={"username": registered_user["username"], "password": registered_user["password"]},
        )
        resp = client.get(f"{PREFIX}/me")
        assert resp.status_code == 200, resp.text
        assert resp.json()["data"]["user"]["username"] == registered_user["username"]

    def test_header_takes_priority_over_cookie(self, client: TestClient, registered_user: dict) -> None:
        """A valid header wins even when the cookie holds garbage."""
        client.cookies.set("accessToken", "garbage")
        resp = client.get(f"{PREFIX}/me", headers={"Authorization": f"Bearer {_token_for(registered_user)}"})
        assert resp.status_code == 200
