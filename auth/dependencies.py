"""
auth/dependencies.py -- FastAPI Depends() helper guarding protected routes.

Token sources, in priority order:
  1. Authorization: Bearer <token> header -- API clients.
  2. accessToken cookie -- set by POST /login.

get_current_user() walks the request from unauthenticated to authenticated:
  no token          -> UnauthorizedError("token not found")
  bad/expired token -> UnauthorizedError("invalid token")
  subject deleted   -> NotFoundError("user not found")
  otherwise         -> request.state.user is set and the User is returned

The loaded User never carries the password hash or the stored refresh token.

Layer rule: no imports from api/. This module may import from fastapi because
it is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import User
from auth.store import UserStore
from auth.tokens import ACCESS_COOKIE, decode_access_token
from core.errors import NotFoundError, UnauthorizedError


def extract_token(request: Request) -> str | None:
    """Return the bearer token from the Authorization header, else the cookie."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(ACCESS_COOKIE) or None


def get_current_user(request: Request) -> User:
    """Require a valid access token and an existing subject.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    token = extract_token(request)
    if token is None:
        raise UnauthorizedError("token not found")

    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedError("invalid token")

    user_store: UserStore = request.app.state.user_store
    user = user_store.get_public_by_id(payload["id"])
    if user is None:
        raise NotFoundError("user not found")

    request.state.user = user
    return user
