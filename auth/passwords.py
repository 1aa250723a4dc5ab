"""
auth/passwords.py -- bcrypt password hashing and verification.

Security design decisions:
  bcrypt directly, no passlib wrapper. passlib's internal wrap-bug detection
  feeds bcrypt 4.x+ a password longer than 72 bytes, which it rejects with an
  explicit error. Direct bcrypt usage has no compatibility shim.

  Cost factor: bcrypt_rounds from Settings (default 14). Every extra round
  doubles the work, so hash() is intentionally slow -- registration and
  sign-in spend most of their time here.

  72-byte limit: bcrypt only looks at the first 72 bytes of input and current
  releases raise ValueError past that. too_long() lets the service reject such
  passwords at registration instead of storing a hash that ignores the tail.

  Timing equalization: verify_dummy() runs one full bcrypt check against a
  fixed hash so an unknown email costs the same as a wrong password [C1].

Layer rule: no imports from api/.
"""

from __future__ import annotations

import bcrypt

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor.

    Usage:
        hasher = PasswordHasher(rounds=14)
        hashed = hasher.hash("secret123")
        hasher.verify("secret123", hashed)   # True
    """

    def __init__(self, rounds: int = 14) -> None:
        self.rounds = rounds
        # Computed once so the first failed sign-in is not measurably slower
        # than later ones. Same cost factor as real hashes.
        self._dummy_hash = self.hash("authgate_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain. Output differs on every call (fresh salt)."""
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Never raises.

        A malformed stored hash or an over-long password is a mismatch, not an
        error -- callers only ever need the boolean. Over-long input is
        rejected before bcrypt sees it: some bcrypt releases truncate to 72
        bytes, which would let any suffix match a 72-byte password.
        """
        if self.too_long(plain):
            return False
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plain: str) -> None:
        """Burn one verification's worth of CPU for a user that does not exist [C1]."""
        self.verify(plain, self._dummy_hash)

    @staticmethod
    def too_long(plain: str) -> bool:
        return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES
