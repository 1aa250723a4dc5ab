"""
auth/dependencies.py -- FastAPI Depends() helpers for session authentication.

get_auth_service() returns the AuthService built in the lifespan.
session_claim() reads the userid/session cookies into a SessionClaim; a
missing cookie becomes None and the validator rejects it as missing_claim.
require_session() validates the claim and raises 401 on any failure.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from auth.cookies import SESSION_COOKIE, USER_COOKIE
from auth.models import SessionClaim
from auth.service import AuthService


@dataclass(frozen=True)
class AuthenticatedSession:
    """What a protected route knows once the claim has been validated."""

    user_id: str
    token: str


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def session_claim(request: Request) -> SessionClaim:
    return SessionClaim(
        user_id=request.cookies.get(USER_COOKIE),
        token=request.cookies.get(SESSION_COOKIE),
    )


def require_session(
    claim: SessionClaim = Depends(session_claim),
    service: AuthService = Depends(get_auth_service),
) -> AuthenticatedSession:
    """Require a valid session. Raises UnauthorizedError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(session: AuthenticatedSession = Depends(require_session)): ...
    """
    user_id = service.verify_session(claim)
    return AuthenticatedSession(user_id=user_id, token=claim.token)
