"""
auth/models.py -- Domain dataclasses for account entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; api/models.py owns the HTTP transport shapes.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    password holds the bcrypt hash, never the plaintext. It is None (together
    with refresh_token) when the record was loaded through a public lookup
    such as UserStore.get_public_by_id().
    """

    name: str
    username: str
    email: str
    id: int | None = None
    password: str | None = None
    refresh_token: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class UserSummary:
    """The non-sensitive view of a user -- the only shape returned to clients."""

    id: int
    name: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> UserSummary:
        return cls(id=user.id, name=user.name, username=user.username, email=user.email)


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login: who logged in plus the issued token pair."""

    user: UserSummary
    access_token: str
    refresh_token: str
