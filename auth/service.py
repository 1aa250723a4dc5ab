"""
auth/service.py -- AuthService composes the stores, hasher and validator.

Operations:
  register(name, email, password)   -> user_id
  sign_in(email, password)          -> SignInResult (user_id, token, expires_in)
  sign_out(token)                   -> None
  verify_session(claim)             -> user_id
  get_profile(user_id)              -> Profile

Every failure is an AuthError subclass. Persistence failures are collapsed
into the caller-facing error of the operation (InvalidRequestError for
register, UnauthorizedError for the session paths) and logged here, so the
HTTP layer never has to know which store failed. sign_out is the exception:
a failed delete leaves the session usable, so it surfaces as
StoreUnavailableError instead of reporting a logout that did not happen.

Dependencies are injected at construction (see api/main.py lifespan); the
service holds no other state, so every call is independent.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import secrets

from auth.errors import DuplicateEmailError, InvalidRequestError, StoreUnavailableError, UnauthorizedError
from auth.models import Profile, SessionClaim, SignInResult
from auth.passwords import PasswordHasher
from auth.sessions import SessionStore
from auth.store import UserStore
from auth.validator import SessionValidator

logger = logging.getLogger("authgate.auth")

DEFAULT_SESSION_TTL = 24 * 60 * 60


def generate_session_token() -> str:
    """Return a new session token: 32 random bytes as 64 hex characters.

    256 bits of entropy makes collisions and guessing both infeasible.
    """
    return secrets.token_hex(32)


class AuthService:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        validator: SessionValidator | None = None,
        session_ttl: int = DEFAULT_SESSION_TTL,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.validator = validator or SessionValidator(sessions)
        self.session_ttl = session_ttl

    def register(self, name: str | None, email: str, password: str) -> str:
        """Create a user. Duplicate email is an InvalidRequestError, not a conflict."""
        if not email or not password:
            raise InvalidRequestError("email and password are required")
        if self.hasher.too_long(password):
            raise InvalidRequestError("password exceeds 72 bytes")

        try:
            if self.users.exists(email):
                logger.info("Registration rejected: email already registered")
                raise InvalidRequestError("email already registered")
            hashed = self.hasher.hash(password)
            user_id = self.users.create_user(name or "", email, hashed)
        except DuplicateEmailError as exc:
            # Lost the race against a concurrent registration for the same email.
            logger.info("Registration rejected: email already registered (constraint)")
            raise InvalidRequestError("email already registered") from exc
        except StoreUnavailableError as exc:
            logger.warning("Registration failed: user store unavailable")
            raise InvalidRequestError("could not create user") from exc

        logger.info("User registered id=%s", user_id)
        return user_id

    def sign_in(self, email: str, password: str) -> SignInResult:
        """Check credentials and open a new session.

        Always runs bcrypt whether or not the email exists so response time
        does not reveal registered emails [C1]. Nothing is written to the
        session store unless the password matched.
        """
        if not email or not password:
            raise InvalidRequestError("email and password are required")

        try:
            user = self.users.get_by_email(email)
        except StoreUnavailableError as exc:
            raise UnauthorizedError("user store unavailable") from exc

        if user is None:
            self.hasher.verify_dummy(password)
            logger.info("Sign-in rejected: unknown email")
            raise UnauthorizedError("bad credentials")
        if not self.hasher.verify(password, user.hashed_password):
            logger.info("Sign-in rejected: bad password for id=%s", user.id)
            raise UnauthorizedError("bad credentials")

        token = generate_session_token()
        try:
            self.sessions.put(token, user.id, self.session_ttl)
        except StoreUnavailableError as exc:
            logger.warning("Sign-in failed: session store unavailable for id=%s", user.id)
            raise UnauthorizedError("could not create session") from exc

        logger.info("Session opened for id=%s", user.id)
        return SignInResult(user_id=user.id, token=token, expires_in=self.session_ttl)

    def sign_out(self, token: str) -> None:
        """Delete the session. Idempotent; the caller has already validated it."""
        self.sessions.delete(token)
        logger.info("Session closed")

    def verify_session(self, claim: SessionClaim) -> str:
        """Return the user id bound to a valid claim, else raise UnauthorizedError."""
        check = self.validator.validate(claim)
        if not check.is_valid:
            raise UnauthorizedError(check.reason.value if check.reason else None)
        return check.user_id

    def get_profile(self, user_id: str) -> Profile:
        """Look up a validated user's profile.

        A validated session pointing at a missing user is an identity
        inconsistency, reported as UnauthorizedError rather than 404.
        """
        try:
            user = self.users.get_by_id(user_id)
        except StoreUnavailableError as exc:
            raise UnauthorizedError("user store unavailable") from exc
        if user is None:
            logger.warning("Session bound to unknown user id=%s", user_id)
            raise UnauthorizedError("user not found")
        return Profile(user_id=user.id, email=user.email, name=user.name)
