"""
auth/cookies.py -- Write and clear the two session-binding cookies.

  userid   -- plaintext user id (the claimed identity)
  session  -- opaque session token (the proof)

Both cookies are:
  httponly=True     JS cannot read them (XSS mitigation).
  samesite="strict" never sent on cross-site requests (CSRF mitigation).
  secure            only sent over HTTPS; SECURE_COOKIES=false for plain-HTTP dev.
  max_age/expires   match the session store TTL so cookie and session die together.

Clearing resets both to "" with an expiry in the past (the Unix epoch) and
max_age=0, so every browser drops them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import Response

USER_COOKIE = "userid"
SESSION_COOKIE = "session"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _write(response: Response, key: str, value: str, max_age: int, expires: datetime, secure: bool) -> None:
    response.set_cookie(
        key,
        value=value,
        max_age=max_age,
        expires=expires,
        httponly=True,
        secure=secure,
        samesite="strict",
    )


def set_session_cookies(response: Response, user_id: str, token: str, ttl_seconds: int, secure: bool = True) -> None:
    """Bind a freshly issued session to the response."""
    expires = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
    _write(response, USER_COOKIE, user_id, ttl_seconds, expires, secure)
    _write(response, SESSION_COOKIE, token, ttl_seconds, expires, secure)


def clear_session_cookies(response: Response, secure: bool = True) -> None:
    _write(response, USER_COOKIE, "", 0, _EPOCH, secure)
    _write(response, SESSION_COOKIE, "", 0, _EPOCH, secure)
