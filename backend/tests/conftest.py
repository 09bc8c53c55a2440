"""Shared fixtures for auth/session tests."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from classfolio.core.config import Settings
from classfolio.main import create_app
from classfolio.runtime import AppRuntime

TEST_ACCESS_SECRET = "test-access-secret-key-32-bytes-minimum"
TEST_REFRESH_SECRET = "test-refresh-secret-key-32-bytes-minimum"


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Settings factory: fast bcrypt, roomy rate limits, one SQLite file per test."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "classfolio_sqlite_path": str(tmp_path / "classfolio.sqlite3"),
            "classfolio_jwt_access_secret": TEST_ACCESS_SECRET,
            "classfolio_jwt_refresh_secret": TEST_REFRESH_SECRET,
            "classfolio_bcrypt_rounds": 4,
            "classfolio_api_rate_limit_points": 1000,
            "classfolio_auth_rate_limit_points": 1000,
            "classfolio_create_rate_limit_points": 1000,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings()


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def runtime(client: TestClient) -> AppRuntime:
    return client.app.state.runtime


@pytest.fixture
def register_payload() -> dict[str, str]:
    """Default register payload used by API tests."""
    return {
        "username": "alice",
        "email": "alice@x.com",
        "password": "secret1",
        "first_name": "Alice",
        "last_name": "Liddell",
    }


@pytest.fixture
def registered(client: TestClient, register_payload: dict[str, str]) -> dict[str, Any]:
    """Register the default account over HTTP and return the response data."""
    response = client.post("/api/auth/register", json=register_payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]
