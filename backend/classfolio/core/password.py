"""Password hashing helpers for auth services."""

from __future__ import annotations

import base64
import hashlib

from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 12


class HashingError(RuntimeError):
    """Raised when the underlying bcrypt transform fails or a stored hash is malformed."""


def _bcrypt_input(plain_password: str) -> str:
    # bcrypt rejects NUL and ignores bytes past 72; feed it a fixed 44-char
    # base64 SHA-256 digest so every password is accepted in full.
    raw = plain_password.encode("utf-8", "surrogatepass")
    return base64.b64encode(hashlib.sha256(raw).digest()).decode("ascii")


class PasswordHasher:
    """bcrypt hash/verify with a configurable cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        # Keep algorithms centralized so auth code only depends on this class.
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain_password: str) -> str:
        """Hash plaintext password with a fresh random salt."""
        try:
            return self._context.hash(_bcrypt_input(plain_password))
        except (TypeError, ValueError) as exc:
            raise HashingError("error hashing password") from exc

    def verify(self, plain_password: str, password_hash: str) -> bool:
        """Verify plaintext password against a stored bcrypt hash."""
        try:
            return self._context.verify(_bcrypt_input(plain_password), password_hash)
        except (TypeError, ValueError) as exc:
            raise HashingError("error comparing passwords") from exc
