"""Session/token issuance for auth endpoints."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import TYPE_CHECKING

from classfolio.auth.errors import raise_account_not_found
from classfolio.auth.repository import Account
from classfolio.core.tokens import TokenKind

if TYPE_CHECKING:
    from classfolio.runtime import AppRuntime


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def token_pair(runtime: AppRuntime, *, access_token: str, refresh_token: str) -> dict[str, object]:
    return {
        "access_token": access_token,
        "expires_in": runtime.tokens.expires_in(TokenKind.ACCESS),
        "refresh_token": refresh_token,
        "refresh_expires_in": runtime.tokens.expires_in(TokenKind.REFRESH),
    }


def issue_auth_session(
    runtime: AppRuntime,
    account: Account,
    *,
    now: datetime,
    record_login: bool = False,
) -> dict[str, object]:
    """Mint an access/refresh pair and append the refresh token to the account.

    With ``record_login`` the last-login stamp is written in the same commit
    as the new token.
    """
    access_token = runtime.tokens.issue_access_token(account.id, now=now)
    refresh_token = runtime.tokens.issue_refresh_token(account.id, now=now)
    now_iso = to_utc_iso(now)

    appended = runtime.accounts.append_refresh_token(
        account.id,
        refresh_token,
        updated_at=now_iso,
        last_login=now_iso if record_login else None,
    )
    if not appended:
        raise_account_not_found()

    account.updated_at = now_iso
    if record_login:
        account.last_login = now_iso
    response = token_pair(runtime, access_token=access_token, refresh_token=refresh_token)
    response["user"] = account.to_public()
    return response
