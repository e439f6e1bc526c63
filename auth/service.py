"""
auth/service.py -- Registration, login, and logout.

Each operation takes the store handle explicitly and raises core.errors types
on failure; the API layer turns those into response envelopes. Nothing here
touches a Request or Response -- the route sets and clears cookies.

Known historical behaviour (kept reachable behind settings flags):
  (a) Login presence check. The old check only rejected a request when the
      password was missing AND one of username/email was missing, so a
      password with no identifier slipped through. LEGACY_LOGIN_QUIRKS=true
      restores it; the default requires a password plus username or email.
  (b) Login lookup. The old query compared the *username* column with the
      supplied *email* value, so a username-only login never matched.
      LEGACY_LOGIN_QUIRKS=true restores it.
  (c) Logout leaves the stored refresh token in place, so it stays valid
      until it expires. REVOKE_REFRESH_ON_LOGOUT=true clears it.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import LoginResult, User, UserSummary
from auth.store import UserStore
from auth.tokens import (
    decode_access_token,
    generate_access_token,
    generate_refresh_token,
    hash_password,
    verify_password,
)
from core.config import get_settings
from core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError

logger = logging.getLogger("accounts.auth")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_user(
    store: UserStore,
    name: str | None,
    username: str | None,
    email: str | None,
    password: str | None,
) -> UserSummary:
    """Create a new account and return its public summary.

    Raises ValidationError if any field is empty and ConflictError if the
    username or email is already registered. The password is hashed before
    the insert, so plaintext never reaches the store.
    """
    if any(_blank(v) for v in (name, username, email, password)):
        raise ValidationError("All fields are required or one field is missing")

    if store.find_by_username_or_email(username, email) is not None:
        raise ConflictError("Username or email already exists")

    user = User(name=name, username=username, email=email, password=hash_password(password))
    try:
        user.id = store.create_user(user)
    except IntegrityError as exc:
        # A concurrent registration won the race between the check and the insert.
        raise ConflictError("Username or email already exists", cause=exc) from exc

    logger.info("Registered user id=%s username=%s", user.id, username)
    return UserSummary.from_user(user)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def _validate_login(username: str | None, email: str | None, password: str | None, legacy: bool) -> None:
    if legacy:
        missing = (_blank(email) or _blank(username)) and _blank(password)
    else:
        missing = _blank(password) or (_blank(username) and _blank(email))
    if missing:
        raise ValidationError("Username or email and password are required")


def _lookup_for_login(store: UserStore, username: str | None, email: str | None, legacy: bool) -> User | None:
    if legacy:
        # Differs from the historical query when email is absent: that query
        # dropped the missing keys and could match any user; here it matches nobody.
        return store.find_by_username_or_email(email, email)
    return store.find_by_username_or_email(username or None, email or None)


def login_user(store: UserStore, username: str | None, email: str | None, password: str | None) -> LoginResult:
    """Verify credentials, issue a token pair, and persist the refresh token.

    Raises ValidationError on missing credentials, NotFoundError if no user
    matches, and UnauthorizedError on a wrong password. No tokens are issued
    unless every check passes.
    """
    legacy = get_settings().legacy_login_quirks
    _validate_login(username, email, password, legacy)

    user = _lookup_for_login(store, username, email, legacy)
    if user is None:
        logger.info("Login failed: no user for username=%s email=%s", username, email)
        raise NotFoundError("User not found")

    if not verify_password(password or "", user.password or ""):
        logger.info("Login failed: bad password for user id=%s", user.id)
        raise UnauthorizedError("Invalid password")

    access_token = generate_access_token(user)
    refresh_token = generate_refresh_token(user)
    store.set_refresh_token(user.id, refresh_token)

    logger.info("User id=%s logged in", user.id)
    return LoginResult(
        user=UserSummary.from_user(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


def logout_user(store: UserStore, token: str | None) -> None:
    """End the session carried by the access-token cookie.

    Only presence of the token is checked. With REVOKE_REFRESH_ON_LOGOUT the
    stored refresh token of the token's subject is cleared as well; a token
    that does not decode is ignored there rather than failing the logout.
    """
    if not token:
        raise UnauthorizedError("No token found")

    if get_settings().revoke_refresh_on_logout:
        payload = decode_access_token(token)
        if payload is not None:
            store.set_refresh_token(payload["id"], None)
            logger.info("Cleared stored refresh token for user id=%s", payload["id"])

    logger.info("Logout processed")
