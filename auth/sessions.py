"""
auth/sessions.py -- TTL key-value store mapping session tokens to user IDs.

Each row is (token -> user_id, expires_at). Expiry is passive: get() treats a
row past its expires_at as absent and deletes it on the way out. purge_expired()
only reclaims space for tokens nobody presents again; correctness never
depends on it running.

Atomicity: put(), get() and delete() each touch a single key inside a single
transaction. No operation spans keys.

The clock is injectable (defaults to time.time) so tests can move time
forward instead of sleeping.

Usage:
    sessions = SessionStore("sqlite:///authgate.db")
    sessions.put(token, user_id, ttl_seconds=86400)
    sessions.get(token)        # user_id or None
    sessions.delete(token)     # idempotent
    sessions.purge_expired()   # call periodically to trim dead rows

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import Column, Float, MetaData, String, Table, text
from sqlalchemy.engine import Engine

from auth.errors import StoreUnavailableError, store_errors
from auth.models import Session
from auth.store import make_engine

logger = logging.getLogger("authgate.sessions")

# Own MetaData so the sessions table can live in a different database than
# the users table (SESSION_STORE_URL).
_metadata = MetaData()

_sessions = Table(
    "sessions",
    _metadata,
    Column("token", String(128), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("expires_at", Float, nullable=False, index=True),  # epoch seconds
)


class SessionStore:
    def __init__(self, db_url: str, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.engine: Engine = make_engine(db_url)
        with store_errors("sessions.create_schema"):
            _metadata.create_all(self.engine)

    def put(self, token: str, user_id: str, ttl_seconds: int) -> Session:
        """Bind token to user_id for ttl_seconds, replacing any existing binding."""
        session = Session(token=token, user_id=user_id, expires_at=self._clock() + ttl_seconds)
        with store_errors("sessions.put"):
            with self.engine.begin() as conn:
                conn.execute(_sessions.delete().where(_sessions.c.token == token))
                conn.execute(
                    _sessions.insert().values(
                        token=session.token,
                        user_id=session.user_id,
                        expires_at=session.expires_at,
                    )
                )
        return session

    def get(self, token: str) -> str | None:
        """Return the user_id bound to token, or None if absent or expired."""
        with store_errors("sessions.get"):
            with self.engine.connect() as conn:
                row = conn.execute(_sessions.select().where(_sessions.c.token == token)).fetchone()
        if row is None:
            return None
        if row.expires_at <= self._clock():
            self.delete(token)
            return None
        return row.user_id

    def delete(self, token: str) -> None:
        """Remove token. Deleting an absent token is not an error."""
        with store_errors("sessions.delete"):
            with self.engine.begin() as conn:
                conn.execute(_sessions.delete().where(_sessions.c.token == token))

    def purge_expired(self) -> int:
        """Delete all expired rows. Returns number of rows removed."""
        with store_errors("sessions.purge"):
            with self.engine.begin() as conn:
                result = conn.execute(_sessions.delete().where(_sessions.c.expires_at <= self._clock()))
        if result.rowcount:
            logger.info("Purged %d expired sessions", result.rowcount)
        return result.rowcount

    def ping(self) -> bool:
        """Return True if the session database answers a trivial query."""
        try:
            with store_errors("sessions.ping"):
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
        except StoreUnavailableError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
