"""
API request and response models for AuthGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields default to "" so a body with a missing field reaches the
service, which rejects empty email/password as invalid_request. A body that
is not JSON or has wrong types never gets that far -- FastAPI raises
RequestValidationError and api/main.py answers 400.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /register. name is optional."""

    name: Optional[str] = Field(default="", max_length=255)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=1024)


class LoginRequest(BaseModel):
    """Request body for POST /login.

    No length limits here: an over-long credential is just a wrong one and
    gets the same 401 as any other.
    """

    email: str = ""
    password: str = ""


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str


class ProfileResponse(BaseModel):
    """Response for GET /profile."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: str


class VerifySessionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
