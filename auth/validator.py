"""
auth/validator.py -- Match a caller's session claim against the session store.

A claim is two caller-asserted values: the user id and the session token
(in HTTP, the userid and session cookies). The token is the source of truth.
The claimed user id is not trusted on its own; it must equal the user id the
store has bound to the token. A valid token presented with someone else's
user id is rejected, so forging the userid cookie alone gets an attacker
nothing.

Outcomes:
  VALID    -- token found, unexpired, bound to the claimed user id
  INVALID  -- missing_claim | not_found_or_expired | mismatch | store_unavailable

Callers must not branch on the reason: every INVALID outcome becomes the same
Unauthorized response. The reason is logged and kept on the result for
diagnostics only.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from auth.errors import StoreUnavailableError
from auth.models import InvalidReason, SessionCheck, SessionClaim, SessionState
from auth.sessions import SessionStore

logger = logging.getLogger("authgate.auth")


class SessionValidator:
    def __init__(self, sessions: SessionStore) -> None:
        self._sessions = sessions

    def validate(self, claim: SessionClaim) -> SessionCheck:
        if not claim.user_id or not claim.token:
            return self._invalid(InvalidReason.MISSING_CLAIM)

        try:
            stored_user_id = self._sessions.get(claim.token)
        except StoreUnavailableError:
            return self._invalid(InvalidReason.STORE_UNAVAILABLE)

        if stored_user_id is None:
            return self._invalid(InvalidReason.NOT_FOUND_OR_EXPIRED)
        if stored_user_id != claim.user_id:
            return self._invalid(InvalidReason.MISMATCH)

        return SessionCheck(state=SessionState.VALID, user_id=stored_user_id, token=claim.token)

    @staticmethod
    def _invalid(reason: InvalidReason) -> SessionCheck:
        if reason is InvalidReason.MISMATCH:
            logger.warning("Session rejected: token bound to a different user id")
        else:
            logger.info("Session rejected: %s", reason.value)
        return SessionCheck(state=SessionState.INVALID, reason=reason)
