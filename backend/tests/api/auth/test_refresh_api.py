"""Refresh endpoint contract tests."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi.testclient import TestClient

from classfolio.auth.session import to_utc_iso
from classfolio.auth.session import utc_now
from classfolio.runtime import AppRuntime
from tests.helpers import bearer


def _refresh(client: TestClient, refresh_token: str | None) -> Any:
    return client.post("/api/auth/refresh", json={"refresh_token": refresh_token})


def test_refresh_rotates_refresh_token(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    """Contract: new pair returned, old refresh token removed from the session list."""
    old_token = registered["refresh_token"]

    response = _refresh(client, old_token)

    assert response.status_code == 200
    data = response.json()["data"]
    assert {"access_token", "expires_in", "refresh_token", "refresh_expires_in"} <= set(data)
    assert data["refresh_token"] != old_token
    assert runtime.accounts.list_refresh_tokens(registered["user"]["id"]) == [data["refresh_token"]]

    profile = client.get("/api/auth/profile", headers=bearer(data["access_token"]))
    assert profile.status_code == 200


def test_reusing_rotated_token_is_rejected(client: TestClient, registered: dict[str, Any]) -> None:
    old_token = registered["refresh_token"]
    assert _refresh(client, old_token).status_code == 200

    reuse = _refresh(client, old_token)

    assert reuse.status_code == 401
    assert reuse.json() == {
        "success": False,
        "message": "Invalid refresh token",
        "error": "AUTH_REFRESH_INVALID",
    }


def test_refresh_chain_keeps_working(client: TestClient, registered: dict[str, Any]) -> None:
    token = registered["refresh_token"]
    for _ in range(3):
        response = _refresh(client, token)
        assert response.status_code == 200
        token = response.json()["data"]["refresh_token"]


def test_missing_refresh_token_is_400(client: TestClient) -> None:
    response = client.post("/api/auth/refresh", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


def test_random_and_access_tokens_are_rejected(client: TestClient, registered: dict[str, Any]) -> None:
    assert _refresh(client, "not-a-jwt").status_code == 401
    assert _refresh(client, registered["access_token"]).status_code == 401


def test_signed_but_unlisted_token_is_rejected(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    """Contract: a validly signed token that was never stored cannot mint sessions."""
    stray = runtime.tokens.issue_refresh_token(registered["user"]["id"], now=utc_now())

    assert _refresh(client, stray).status_code == 401


def test_expired_listed_token_is_rejected(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    account_id = registered["user"]["id"]
    expired = runtime.tokens.issue_refresh_token(account_id, now=utc_now() - timedelta(days=31))
    runtime.accounts.append_refresh_token(account_id, expired, updated_at=to_utc_iso(utc_now()))

    assert _refresh(client, expired).status_code == 401
    assert runtime.accounts.contains_refresh_token(account_id, expired)


def test_inactive_account_cannot_refresh(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    runtime.accounts.set_active(registered["user"]["id"], False, updated_at=to_utc_iso(utc_now()))

    assert _refresh(client, registered["refresh_token"]).status_code == 401
