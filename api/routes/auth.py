"""
api/routes/auth.py -- Registration, login and session REST endpoints.

Routes:
  POST /register        -- create a user; 200 {"status": "User created"}
  POST /login           -- check credentials; set userid/session cookies
  POST /logout          -- delete the session; clear cookies; 201
  GET  /profile         -- user_id, email, name of the session's user
  GET  /verify-session  -- user_id of the session's user

Security:
  [H2] POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  [C1] AuthService.sign_in() equalizes timing for unknown emails.
  [M5] Cache-Control: no-store on login responses.
  Handlers are plain def, not async def: bcrypt is CPU-bound and FastAPI runs
  sync handlers in its thread pool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    StatusResponse,
    VerifySessionResponse,
)
from auth.cookies import clear_session_cookies, set_session_cookies
from auth.dependencies import AuthenticatedSession, get_auth_service, require_session
from auth.service import AuthService
from core.config import get_settings

# Auth policy:
# - POST /register:        public
# - POST /login:           public, rate limited
# - POST /logout:          requires a valid session (require_session)
# - GET  /profile:         requires a valid session (require_session)
# - GET  /verify-session:  requires a valid session (require_session)
router = APIRouter()

_settings = get_settings()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/register", response_model=StatusResponse)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> StatusResponse:
    """Create a user account.

    Empty email/password and an already registered email both answer 400
    invalid_request -- there is deliberately no separate 409.
    """
    service.register(body.name, body.email, body.password)
    return StatusResponse(status="User created")


@limiter.limit(_settings.login_rate_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=StatusResponse)
def login(request: Request, body: LoginRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Authenticate with email and password; bind the new session as cookies.

    Unknown email and wrong password return the same 401 so the response does
    not reveal which emails are registered.
    """
    result = service.sign_in(body.email, body.password)
    resp = JSONResponse(status_code=200, content=StatusResponse(status="success").model_dump())
    set_session_cookies(resp, result.user_id, result.token, result.expires_in, secure=_settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


@router.post("/logout", status_code=201, response_model=StatusResponse)
def logout(
    session: AuthenticatedSession = Depends(require_session),
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Delete the current session and clear both cookies."""
    service.sign_out(session.token)
    resp = JSONResponse(status_code=201, content=StatusResponse(status="success").model_dump())
    clear_session_cookies(resp, secure=_settings.secure_cookies)
    return resp


@router.get("/profile", response_model=ProfileResponse)
def profile(
    session: AuthenticatedSession = Depends(require_session),
    service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    """Return identity information for the session's user."""
    found = service.get_profile(session.user_id)
    return ProfileResponse(user_id=found.user_id, email=found.email, name=found.name)


@router.get("/verify-session", response_model=VerifySessionResponse)
def verify_session(session: AuthenticatedSession = Depends(require_session)) -> VerifySessionResponse:
    """Confirm the cookies describe a live session. Used by downstream services."""
    return VerifySessionResponse(user_id=session.user_id)
