"""Change-password endpoint contract tests."""

from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient

from classfolio.runtime import AppRuntime
from tests.helpers import bearer


def test_change_password_revokes_every_refresh_token(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    """Contract: tokens valid before the change fail after it; nothing new is issued."""
    other_device = client.post(
        "/api/auth/login",
        json={"username": "alice", "password": "secret1"},
    ).json()["data"]

    response = client.put(
        "/api/auth/change-password",
        json={"current_password": "secret1", "new_password": "secret2"},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 200
    assert response.json()["data"] is None
    assert runtime.accounts.list_refresh_tokens(registered["user"]["id"]) == []
    for token in (registered["refresh_token"], other_device["refresh_token"]):
        refresh = client.post("/api/auth/refresh", json={"refresh_token": token})
        assert refresh.status_code == 401

    old_login = client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
    new_login = client.post("/api/auth/login", json={"username": "alice", "password": "secret2"})
    assert old_login.status_code == 401
    assert new_login.status_code == 200


def test_wrong_current_password_is_401_and_keeps_sessions(
    client: TestClient,
    runtime: AppRuntime,
    registered: dict[str, Any],
) -> None:
    response = client.put(
        "/api/auth/change-password",
        json={"current_password": "wrong1", "new_password": "secret2"},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Current password is incorrect"
    assert runtime.accounts.list_refresh_tokens(registered["user"]["id"]) == [
        registered["refresh_token"]
    ]


def test_new_password_must_meet_minimum_length(client: TestClient, registered: dict[str, Any]) -> None:
    response = client.put(
        "/api/auth/change-password",
        json={"current_password": "secret1", "new_password": "123"},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "new_password"
