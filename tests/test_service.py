"""Unit tests for auth/service.py -- the register / sign-in / sign-out / verify / profile flows.

Covers:
- register: success, empty fields, duplicate email (check and constraint), store failure
- register: concurrent duplicate registrations -- exactly one wins
- sign_in: success issues a session; bad password / unknown email issue nothing
- sign_out: idempotent; verify afterwards is Unauthorized
- verify_session: forged user id is Unauthorized
- get_profile: known and unknown users
- end-to-end scenario from registration to logout
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text

from auth.errors import InvalidRequestError, StoreUnavailableError, UnauthorizedError
from auth.models import SessionClaim
from auth.passwords import PasswordHasher
from auth.service import DEFAULT_SESSION_TTL, AuthService, generate_session_token
from auth.sessions import SessionStore
from auth.store import UserStore


def _session_rows(store: SessionStore) -> int:
    with store.engine.connect() as conn:
        return conn.execute(text("SELECT COUNT(*) FROM sessions")).scalar()


# ---------------------------------------------------------------------------
# register
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_creates_user_with_hashed_password(self, service: AuthService, user_store: UserStore) -> None:
        user_id = service.register("Alice", "alice@x.com", "secret123")
        user = user_store.get_by_id(user_id)
        assert user.email == "alice@x.com"
        assert user.name == "Alice"
        assert user.hashed_password != "secret123"
        assert service.hasher.verify("secret123", user.hashed_password)

    def test_register_without_name(self, service: AuthService, user_store: UserStore) -> None:
        user_id = service.register(None, "anon@x.com", "secret123")
        assert user_store.get_by_id(user_id).name == ""

    @pytest.mark.parametrize("email,password", [("", "secret123"), ("alice@x.com", ""), ("", "")])
    def test_register_empty_fields(self, service: AuthService, email: str, password: str) -> None:
        with pytest.raises(InvalidRequestError):
            service.register("Alice", email, password)

    def test_register_password_over_72_bytes(self, service: AuthService) -> None:
        with pytest.raises(InvalidRequestError):
            service.register("Alice", "alice@x.com", "p" * 73)

    def test_register_duplicate_email(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        with pytest.raises(InvalidRequestError):
            service.register("Alice Again", "alice@x.com", "other-password")

    def test_duplicate_caught_by_constraint_when_check_is_raced(
        self, service: AuthService, user_store: UserStore, monkeypatch
    ) -> None:
        """Simulate losing the exists()/insert race: the UNIQUE constraint still rejects it."""
        service.register("Alice", "alice@x.com", "secret123")
        monkeypatch.setattr(user_store, "exists", lambda email: False)
        with pytest.raises(InvalidRequestError):
            service.register("Alice Again", "alice@x.com", "other-password")

    def test_store_failure_is_invalid_request(self, service: AuthService, user_store: UserStore, monkeypatch) -> None:
        def boom(*args, **kwargs):
            raise StoreUnavailableError("users.create")

        monkeypatch.setattr(user_store, "create_user", boom)
        with pytest.raises(InvalidRequestError):
            service.register("Alice", "alice@x.com", "secret123")

    def test_concurrent_duplicate_registration(self, tmp_path, hasher: PasswordHasher) -> None:
        """Two threads register the same email at once: one succeeds, one is InvalidRequest."""
        users = UserStore(f"sqlite:///{tmp_path / 'users.db'}")
        sessions = SessionStore(f"sqlite:///{tmp_path / 'sessions.db'}")
        svc = AuthService(users=users, sessions=sessions, hasher=hasher)
        barrier = threading.Barrier(2)

        def attempt(name: str) -> str:
            barrier.wait()
            try:
                svc.register(name, "race@x.com", "secret123")
            except InvalidRequestError:
                return "rejected"
            return "created"

        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                outcomes = sorted(pool.map(attempt, ["first", "second"]))
            assert outcomes == ["created", "rejected"]
            with users.engine.connect() as conn:
                assert conn.execute(text("SELECT COUNT(*) FROM users")).scalar() == 1
        finally:
            users.close()
            sessions.close()


# ---------------------------------------------------------------------------
# sign_in
# ---------------------------------------------------------------------------


class TestSignIn:
    def test_sign_in_issues_session(self, service: AuthService, session_store: SessionStore) -> None:
        user_id = service.register("Alice", "alice@x.com", "secret123")
        result = service.sign_in("alice@x.com", "secret123")
        assert result.user_id == user_id
        assert result.expires_in == DEFAULT_SESSION_TTL
        assert len(result.token) == 64
        assert session_store.get(result.token) == user_id

    def test_each_sign_in_gets_a_new_token(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        first = service.sign_in("alice@x.com", "secret123")
        second = service.sign_in("alice@x.com", "secret123")
        assert first.token != second.token

    def test_wrong_password_creates_no_session(self, service: AuthService, session_store: SessionStore) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        with pytest.raises(UnauthorizedError):
            service.sign_in("alice@x.com", "wrongpass")
        assert _session_rows(session_store) == 0

    def test_suffix_past_72_bytes_does_not_match(self, service: AuthService, session_store: SessionStore) -> None:
        """A 72-byte password plus anything is a different password, whatever bcrypt truncates."""
        service.register("Alice", "alice@x.com", "x" * 72)
        with pytest.raises(UnauthorizedError):
            service.sign_in("alice@x.com", "x" * 72 + "suffix")
        assert _session_rows(session_store) == 0

    def test_unknown_email(self, service: AuthService, session_store: SessionStore) -> None:
        with pytest.raises(UnauthorizedError):
            service.sign_in("nobody@x.com", "secret123")
        assert _session_rows(session_store) == 0

    @pytest.mark.parametrize("email,password", [("", "secret123"), ("alice@x.com", "")])
    def test_empty_fields(self, service: AuthService, email: str, password: str) -> None:
        with pytest.raises(InvalidRequestError):
            service.sign_in(email, password)

    def test_session_store_failure_is_unauthorized(
        self, service: AuthService, session_store: SessionStore, monkeypatch
    ) -> None:
        service.register("Alice", "alice@x.com", "secret123")

        def boom(*args, **kwargs):
            raise StoreUnavailableError("sessions.put")

        monkeypatch.setattr(session_store, "put", boom)
        with pytest.raises(UnauthorizedError):
            service.sign_in("alice@x.com", "secret123")

    def test_session_ttl_is_configurable(
        self, user_store: UserStore, session_store: SessionStore, hasher: PasswordHasher, clock
    ) -> None:
        svc = AuthService(users=user_store, sessions=session_store, hasher=hasher, session_ttl=60)
        svc.register("Alice", "alice@x.com", "secret123")
        result = svc.sign_in("alice@x.com", "secret123")
        assert result.expires_in == 60
        clock.advance(60)
        with pytest.raises(UnauthorizedError):
            svc.verify_session(SessionClaim(user_id=result.user_id, token=result.token))


# ---------------------------------------------------------------------------
# sign_out / verify_session / get_profile
# ---------------------------------------------------------------------------


class TestSessions:
    def test_sign_out_then_verify_is_unauthorized(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        result = service.sign_in("alice@x.com", "secret123")
        claim = SessionClaim(user_id=result.user_id, token=result.token)
        assert service.verify_session(claim) == result.user_id

        service.sign_out(result.token)
        with pytest.raises(UnauthorizedError):
            service.verify_session(claim)

    def test_sign_out_twice_does_not_error(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        result = service.sign_in("alice@x.com", "secret123")
        service.sign_out(result.token)
        service.sign_out(result.token)

    def test_sign_out_only_ends_that_session(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        phone = service.sign_in("alice@x.com", "secret123")
        laptop = service.sign_in("alice@x.com", "secret123")
        service.sign_out(phone.token)
        assert service.verify_session(SessionClaim(user_id=laptop.user_id, token=laptop.token)) == laptop.user_id

    def test_sign_out_store_failure_propagates(
        self, service: AuthService, session_store: SessionStore, monkeypatch
    ) -> None:
        def boom(token: str) -> None:
            raise StoreUnavailableError("sessions.delete")

        monkeypatch.setattr(session_store, "delete", boom)
        with pytest.raises(StoreUnavailableError):
            service.sign_out("tok")

    def test_verify_rejects_forged_user_id(self, service: AuthService) -> None:
        service.register("Alice", "alice@x.com", "secret123")
        bob_id = service.register("Bob", "bob@x.com", "hunter22")
        alice = service.sign_in("alice@x.com", "secret123")
        with pytest.raises(UnauthorizedError):
            service.verify_session(SessionClaim(user_id=bob_id, token=alice.token))

    def test_verify_rejects_token_never_issued(self, service: AuthService) -> None:
        with pytest.raises(UnauthorizedError):
            service.verify_session(SessionClaim(user_id="user-1", token=generate_session_token()))

    def test_get_profile(self, service: AuthService) -> None:
        user_id = service.register("Alice", "alice@x.com", "secret123")
        profile = service.get_profile(user_id)
        assert (profile.user_id, profile.email, profile.name) == (user_id, "alice@x.com", "Alice")

    def test_get_profile_unknown_user_is_unauthorized(self, service: AuthService) -> None:
        with pytest.raises(UnauthorizedError):
            service.get_profile("00000000-0000-0000-0000-000000000000")


def test_end_to_end_scenario(service: AuthService) -> None:
    """Register -> sign in -> verify -> sign out -> verify fails."""
    alice_id = service.register("Alice", "alice@x.com", "secret123")

    result = service.sign_in("alice@x.com", "secret123")
    claim = SessionClaim(user_id=result.user_id, token=result.token)
    assert service.verify_session(claim) == alice_id

    service.sign_out(result.token)
    with pytest.raises(UnauthorizedError):
        service.verify_session(claim)
