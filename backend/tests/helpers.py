"""Helpers shared by API and unit tests."""

from __future__ import annotations

from classfolio.auth.repository import Account
from classfolio.auth.session import to_utc_iso
from classfolio.auth.session import utc_now
from classfolio.runtime import AppRuntime


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def seed_account(
    runtime: AppRuntime,
    *,
    username: str = "alice",
    email: str = "alice@x.com",
    password: str = "secret1",
    role: str = "staff",
) -> Account:
    """Insert an account directly, bypassing HTTP rate limits."""
    return runtime.accounts.create_account(
        username=username,
        email=email,
        password_hash=runtime.passwords.hash(password),
        first_name=username.capitalize(),
        last_name="Tester",
        role=role,
        created_at=to_utc_iso(utc_now()),
    )
