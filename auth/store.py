"""
auth/store.py -- SQLAlchemy Core persistence layer for users (the credential store).

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Services never touch
SQL directly, and this module never decides HTTP semantics.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  UNIQUE(email) is the single enforcement point for email uniqueness. Writes
  that violate it raise sqlalchemy.exc.IntegrityError; callers translate that
  into a Conflict. There is deliberately no "SELECT then INSERT" pre-check --
  two concurrent registrations of the same email cannot both commit.

Ownership:
  The engine (and its connection pool) is owned by a UserStore instance.
  The application lifespan builds one, stores it on app.state, and calls
  close() on shutdown. Tests build their own against SQLite.

Layer rule: no imports from api/ or users/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, select, text
from sqlalchemy.engine import Engine

from auth.models import User

logger = logging.getLogger("authapi.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash, never plaintext
    Column("role", String(30), nullable=False, server_default="user"),
    Column("created_at", String(32), nullable=False),
)

# Columns safe to hand to any caller; the hash is only read for login.
_public_columns = (_users.c.id, _users.c.name, _users.c.email, _users.c.role, _users.c.created_at)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL and foreign keys on every new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. Foreign keys are off by default in SQLite.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///authapi.db")
        user = store.create_user("Ana", "ana@x.com", hash_password("secret1"))
        store.get_by_email("ana@x.com")
        store.close()
    """

    def __init__(self, db_url: str, echo: bool = False) -> None:
        connect_args: dict = {}
        engine_kwargs: dict = {"echo": echo}
        is_sqlite = db_url.startswith("sqlite")
        if is_sqlite:
            connect_args["check_same_thread"] = False
        else:
            engine_kwargs["pool_pre_ping"] = True
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine, "connect", _sqlite_pragmas)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def ping(self) -> None:
        """Round-trip a trivial query. Raises on connectivity failure."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Relational store reachable (%s)", self.engine.url.render_as_string(hide_password=True))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, name: str, email: str, hashed_password: str) -> User:
        """Insert a new user and return it (without the hash).

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        created_at = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    name=name,
                    email=email,
                    password=hashed_password,
                    created_at=created_at,
                )
            )
            conn.commit()
            user_id = result.inserted_primary_key[0]
        return User(id=user_id, name=name, email=email, created_at=created_at)

    def update_user(self, user_id: int, name: str, email: str) -> User | None:
        """Overwrite name and email. Returns the updated user, or None if user_id is absent.

        Raises sqlalchemy.exc.IntegrityError if the email belongs to another user.
        A missing id matches zero rows, so the table is left untouched.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(name=name, email=email))
            if result.rowcount == 0:
                conn.rollback()
                return None
            row = conn.execute(select(*_public_columns).where(_users.c.id == user_id)).fetchone()
            conn.commit()
        return _row_to_user(row)

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. The hash is not loaded."""
        with self.engine.connect() as conn:
            row = conn.execute(select(*_public_columns).where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email, including the password hash.

        Only the login flow needs this; everything else goes through get_by_id().
        """
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in ascending id order."""
        with self.engine.connect() as conn:
            rows = conn.execute(select(*_public_columns).order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=getattr(row, "password", None),
        role=row.role,
        created_at=row.created_at,
    )
