"""
auth/store.py -- SQLAlchemy Core persistence layer for user records.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Route, service and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is enforced in SQL. exists() is only an early exit for the
  common case -- two concurrent registrations can both pass it, and the
  constraint is what actually rejects the second insert. create_user()
  surfaces that as DuplicateEmailError.

DB URL: DATABASE_URL (see core/config.py). SQLite by default; PostgreSQL is a
connection string change.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateEmailError, StoreUnavailableError, store_errors
from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4, assigned in create_user()
    Column("name", String(255), nullable=False, server_default=""),
    Column("email", String(320), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Engine helpers (shared with auth/sessions.py)
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. In-memory databases ignore it.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an engine with the SQLite tweaks every store needs."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///authgate.db")
        user_id = store.create_user("Alice", "alice@x.com", hasher.hash("secret123"))
        user = store.get_by_email("alice@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        with store_errors("users.create_schema"):
            _metadata.create_all(self.engine)

    def exists(self, email: str) -> bool:
        """Return True iff a user with exactly this email exists."""
        with store_errors("users.exists"):
            with self.engine.connect() as conn:
                row = conn.execute(select(_users.c.id).where(_users.c.email == email).limit(1)).fetchone()
        return row is not None

    def create_user(self, name: str, email: str, hashed_password: str) -> str:
        """Insert a new user and return its assigned ID.

        Raises DuplicateEmailError if the email is already taken (including
        when a concurrent request inserted it after our exists() check), and
        StoreUnavailableError for any other database failure.
        """
        user_id = str(uuid.uuid4())
        with store_errors("users.create"):
            try:
                with self.engine.begin() as conn:
                    conn.execute(
                        _users.insert().values(
                            id=user_id,
                            name=name or "",
                            email=email,
                            hashed_password=hashed_password,
                            created_at=_now_iso(),
                        )
                    )
            except IntegrityError as exc:
                raise DuplicateEmailError(email) from exc
        return user_id

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with store_errors("users.get_by_email"):
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with store_errors("users.get_by_id"):
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with store_errors("users.ping"):
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
        except StoreUnavailableError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name or "",
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
