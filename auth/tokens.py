"""
auth/tokens.py -- JWT issuing, password hashing, and session cookie utilities.

Security design decisions:
  JWT: python-jose with HS256. Two token kinds, each with its own secret:
       access tokens carry id, username, email, and name and expire after
       ACCESS_TOKEN_EXPIRE_SECONDS; refresh tokens carry only the id and
       expire after REFRESH_TOKEN_EXPIRE_SECONDS. Decoding returns None on any
       failure -- the session guard turns that into a 401.

  Passwords: bcrypt directly (no passlib wrapper). bcrypt.checkpw compares
       in constant time.

  Cookies: accessToken and refreshToken, httpOnly, `secure` driven by
       SECURE_COOKIES (off by default, so not suitable for a TLS-only
       deployment until it is switched on).

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User

logger = logging.getLogger("accounts.auth")

_ALGORITHM = "HS256"

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    # bcrypt only uses the first 72 bytes; newer releases raise instead of
    # truncating, so truncate here for both hashing and checking.
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the DB -- treat as a mismatch.
        return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def _encode(payload: dict, secret: str, expire_seconds: int) -> str:
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expire_seconds)
    return jwt.encode(claims, secret, algorithm=_ALGORITHM)


def _decode(token: str, secret: str) -> dict | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if "id" not in payload:
        return None
    return payload


def generate_access_token(user: User) -> str:
    """Sign a short-lived access token for the given user."""
    settings = get_settings()
    payload = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "name": user.name,
    }
    return _encode(payload, settings.access_token_secret, settings.access_token_expire_seconds)


def generate_refresh_token(user: User) -> str:
    """Sign a long-lived refresh token. Only the user id is embedded."""
    settings = get_settings()
    return _encode({"id": user.id}, settings.refresh_token_secret, settings.refresh_token_expire_seconds)


def decode_access_token(token: str) -> dict | None:
    """Verify signature and expiry of an access token. Returns the payload or None."""
    return _decode(token, get_settings().access_token_secret)


def decode_refresh_token(token: str) -> dict | None:
    """Verify signature and expiry of a refresh token. Returns the payload or None."""
    return _decode(token, get_settings().refresh_token_secret)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookies(response, access_token: str, refresh_token: str) -> None:
    """Write both tokens as httpOnly cookies on the response.

    max_age matches each token's expiry so cookie and token lapse together.
    """
    settings = get_settings()
    response.set_cookie(
        REFRESH_COOKIE,
        value=refresh_token,
        httponly=True,
        secure=settings.secure_cookies,
        max_age=settings.refresh_token_expire_seconds,
    )
    response.set_cookie(
        ACCESS_COOKIE,
        value=access_token,
        httponly=True,
        secure=settings.secure_cookies,
        max_age=settings.access_token_expire_seconds,
    )


def clear_auth_cookies(response) -> None:
    """Expire both session cookies. Flags must match the ones used to set them."""
    secure = get_settings().secure_cookies
    response.delete_cookie(REFRESH_COOKIE, httponly=True, secure=secure)
    response.delete_cookie(ACCESS_COOKIE, httponly=True, secure=secure)
