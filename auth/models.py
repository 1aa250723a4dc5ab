"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores, the
validator, and the service do the work; these only own the domain shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class User:
    """A registered identity.

    id is a UUID4 string assigned by UserStore.create_user(); it is None only
    on records that have not been persisted yet. hashed_password is the bcrypt
    hash, never the plaintext. name is optional at registration and stored as
    an empty string when absent.
    """

    email: str
    hashed_password: str
    name: str = ""
    id: str | None = None
    created_at: str | None = None


@dataclass
class Session:
    """An issued login session as stored in the sessions table."""

    token: str
    user_id: str
    expires_at: float  # epoch seconds


@dataclass(frozen=True)
class SessionClaim:
    """The (user id, token) pair a caller presents, e.g. from the userid/session cookies.

    Both values are caller-asserted. Neither is trusted until SessionValidator
    has matched them against the session store.
    """

    user_id: str | None
    token: str | None


class SessionState(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


class InvalidReason(str, Enum):
    MISSING_CLAIM = "missing_claim"
    NOT_FOUND_OR_EXPIRED = "not_found_or_expired"
    MISMATCH = "mismatch"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of validating a SessionClaim.

    reason is set only for INVALID outcomes. It exists for diagnostics --
    every INVALID outcome maps to the same Unauthorized response.
    """

    state: SessionState
    user_id: str | None = None
    token: str | None = None
    reason: InvalidReason | None = None

    @property
    def is_valid(self) -> bool:
        return self.state is SessionState.VALID


@dataclass(frozen=True)
class SignInResult:
    user_id: str
    token: str
    expires_in: int  # seconds


@dataclass(frozen=True)
class Profile:
    user_id: str
    email: str
    name: str
