"""
auth/errors.py -- Exception taxonomy for the auth core.

AuthError subclasses carry the HTTP status and envelope code they map to, so
api/main.py renders all of them with one exception handler. The service raises
only InvalidRequestError, UnauthorizedError and StoreUnavailableError.

DuplicateEmailError is a store-level signal (UNIQUE(email) rejected the
insert). It never reaches the HTTP layer -- the service turns it into
InvalidRequestError.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("authgate.auth")


class AuthError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class InvalidRequestError(AuthError):
    """Malformed or conflicting input: bad body, empty field, duplicate email."""

    status_code = 400
    code = "invalid_request"
    message = "Invalid request."


class UnauthorizedError(AuthError):
    """Missing, invalid or expired credential or session."""

    status_code = 401
    code = "unauthorized"
    message = "Unauthorized."


class StoreUnavailableError(AuthError):
    """A backing store could not complete an operation."""

    status_code = 503
    code = "store_unavailable"
    message = "Storage backend unavailable."


class DuplicateEmailError(Exception):
    """UserStore.create_user() hit the UNIQUE(email) constraint."""


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures inside the block into StoreUnavailableError.

    Usage:
        with store_errors("sessions.get"):
            row = conn.execute(...).fetchone()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store operation %s failed: %s", operation, exc.__class__.__name__)
        raise StoreUnavailableError(operation) from exc
