"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Services and the
session guard never touch SQL directly.

Lifecycle:
  The store is an explicitly constructed handle. connect() creates the engine
  and schema, close() disposes the pool. api/main.py calls both from the
  lifespan and exposes the handle as app.state.user_store. Nothing in this
  module holds a process-wide connection.

Security:
  All queries use bound parameters. No f-strings in SQL.
  get_public_by_id() selects only non-sensitive columns so the session guard
  never loads the password hash or the stored refresh token.

  UNIQUE(username) and UNIQUE(email) back up the application-level duplicate
  check in auth/service.py. Two concurrent registrations can both pass the
  check; the constraint makes the second insert fail with IntegrityError.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, or_, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from auth.models import User
from core.errors import InternalError

logger = logging.getLogger("accounts.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("refresh_token", Text),  # most recently issued refresh token
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Columns safe to hand to request handlers -- no password, no refresh token.
_PUBLIC_COLUMNS = (
    _users.c.id,
    _users.c.name,
    _users.c.username,
    _users.c.email,
    _users.c.created_at,
    _users.c.updated_at,
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url.startswith("sqlite") and (":memory:" in db_url or "mode=memory" in db_url)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///accounts.db")
        store.connect()
        user_id = store.create_user(User(name="Ann", username="ann1", email="a@x.com", password=hashed))
        user = store.get_by_id(user_id)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.db_url = db_url
        self._engine: Engine | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Create the engine, ensure the schema exists, and verify connectivity.

        Raises InternalError("Database connection failed") if the database
        cannot be reached; the original SQLAlchemy error is kept as the cause.
        """
        connect_args: dict = {}
        engine_kwargs: dict = {}
        if self.db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if _is_memory_sqlite(self.db_url):
                # One connection keeps the in-memory database alive and is
                # shared by every thread of the process.
                engine_kwargs["poolclass"] = StaticPool
        try:
            engine = create_engine(self.db_url, connect_args=connect_args, **engine_kwargs)
            if self.db_url.startswith("sqlite"):
                event.listen(engine, "connect", _set_wal_mode)
            _metadata.create_all(engine)
        except SQLAlchemyError as exc:
            logger.error("Database connection failed: %s", exc)
            raise InternalError("Database connection failed", cause=exc) from exc
        self._engine = engine
        logger.info("Database connected successfully")

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise InternalError("Database is not connected")
        return self._engine

    def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by the health endpoint."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, InternalError):
            return False
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        user.password must already be hashed. Raises
        sqlalchemy.exc.IntegrityError if the username or email is taken.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    name=user.name,
                    username=user.username,
                    email=user.email,
                    password=user.password,
                    refresh_token=user.refresh_token,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def find_by_username_or_email(self, username: str | None, email: str | None) -> User | None:
        """Return the first user whose username OR email matches.

        None values are skipped rather than compared against NULL; if both
        are None there is nothing to match and the result is None. The
        returned record includes the password hash -- callers decide what
        leaves the service.
        """
        conditions = []
        if username is not None:
            conditions.append(_users.c.username == username)
        if email is not None:
            conditions.append(_users.c.email == email)
        if not conditions:
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(or_(*conditions)).order_by(_users.c.id)).first()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a full user record by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_public_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key without password or refresh token."""
        with self.engine.connect() as conn:
            row = conn.execute(select(*_PUBLIC_COLUMNS).where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def set_refresh_token(self, user_id: int, refresh_token: str | None) -> bool:
        """Overwrite (or clear, with None) the stored refresh token.

        Returns True if a row was updated, False if user_id was not found.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(refresh_token=refresh_token, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found.

        Tokens already issued to the user keep their signatures; the session
        guard rejects them with 404 once the record is gone.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    # Public lookups select a subset of columns; getattr fills the rest with None.
    return User(
        id=row.id,
        name=row.name,
        username=row.username,
        email=row.email,
        password=getattr(row, "password", None),
        refresh_token=getattr(row, "refresh_token", None),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
