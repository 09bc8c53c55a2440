"""JWT access/refresh token helpers."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Any

import jwt

ALGORITHM = "HS256"


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(ValueError):
    """Base token error."""


class TokenInvalidError(TokenError):
    """Raised when a token cannot be decoded, is tampered, or is of the wrong kind."""


class TokenExpiredError(TokenError):
    """Raised when a token is past its exp claim."""


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified token payload."""

    subject: str
    issued_at: int
    expires_at: int


def _timestamp(value: datetime) -> int:
    return int(value.astimezone(timezone.utc).timestamp())


class TokenIssuer:
    """Signs and verifies the two token kinds, each with its own secret and lifetime."""

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_expires_in_seconds: int,
        refresh_expires_in_seconds: int,
    ) -> None:
        self._secrets = {TokenKind.ACCESS: access_secret, TokenKind.REFRESH: refresh_secret}
        self._lifetimes = {
            TokenKind.ACCESS: access_expires_in_seconds,
            TokenKind.REFRESH: refresh_expires_in_seconds,
        }

    def expires_in(self, kind: TokenKind) -> int:
        return self._lifetimes[kind]

    def issue_access_token(self, account_id: str, *, now: datetime) -> str:
        """Create a JWT access token containing sub, iat and exp."""
        return self._issue(account_id, kind=TokenKind.ACCESS, now=now)

    def issue_refresh_token(self, account_id: str, *, now: datetime) -> str:
        """Create a JWT refresh token containing sub, iat and exp."""
        return self._issue(account_id, kind=TokenKind.REFRESH, now=now)

    def _issue(self, account_id: str, *, kind: TokenKind, now: datetime) -> str:
        issued_at = _timestamp(now)
        exp = _timestamp(now + timedelta(seconds=self._lifetimes[kind]))
        payload: dict[str, Any] = {
            "sub": account_id,
            "iat": issued_at,
            "exp": exp,
            "typ": kind.value,
            # Two tokens minted for one account within the same second must still differ.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=ALGORITHM)

    def verify(self, token: str, kind: TokenKind, *, now: datetime) -> TokenClaims:
        """Decode and validate a token of the given kind at instant `now`."""
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError(f"invalid {kind.value} token") from exc

        if payload.get("typ") != kind.value:
            raise TokenInvalidError(f"invalid {kind.value} token")

        sub = payload.get("sub")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not isinstance(sub, str) or not sub:
            raise TokenInvalidError("missing or invalid sub")
        if not isinstance(iat, int) or not isinstance(exp, int):
            raise TokenInvalidError("missing or invalid iat/exp")

        if _timestamp(now) >= exp:
            raise TokenExpiredError(f"{kind.value} token expired")

        return TokenClaims(subject=sub, issued_at=iat, expires_at=exp)
