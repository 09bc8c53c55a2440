"""Auth-specific HTTP error helpers."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException

from classfolio.auth.http import api_error
from classfolio.core.rate_limit import RateLimitExceededError


def _raise(status_code: int, code: str, message: str, **extra: object) -> NoReturn:
    raise HTTPException(status_code=status_code, detail=api_error(code=code, message=message, **extra))


def raise_validation_error(message: str, *, field: str) -> NoReturn:
    raise HTTPException(
        status_code=400,
        detail=api_error(
            code="VALIDATION_ERROR",
            message=message,
            errors=[{"field": field, "message": message}],
        ),
    )


def raise_invalid_credentials() -> NoReturn:
    """Raise the one response shared by unknown user, inactive user and wrong password."""
    _raise(401, "AUTH_INVALID_CREDENTIALS", "Invalid credentials")


def raise_token_missing() -> NoReturn:
    _raise(401, "AUTH_TOKEN_INVALID", "Access token is required")


def raise_token_invalid() -> NoReturn:
    _raise(401, "AUTH_TOKEN_INVALID", "Invalid or expired token")


def raise_token_expired() -> NoReturn:
    _raise(401, "AUTH_TOKEN_EXPIRED", "Access token expired")


def raise_inactive_account() -> NoReturn:
    _raise(401, "AUTH_TOKEN_INVALID", "Invalid or inactive user")


def raise_refresh_rejected() -> NoReturn:
    _raise(401, "AUTH_REFRESH_INVALID", "Invalid refresh token")


def raise_wrong_current_password() -> NoReturn:
    _raise(401, "AUTH_INVALID_CREDENTIALS", "Current password is incorrect")


def raise_forbidden() -> NoReturn:
    _raise(403, "AUTH_FORBIDDEN", "Insufficient permissions")


def raise_account_not_found() -> NoReturn:
    _raise(404, "ACCOUNT_NOT_FOUND", "User not found")


def raise_conflict(field: str, exc: Exception | None = None) -> NoReturn:
    """Raise 409 naming which unique field collided."""
    raise HTTPException(
        status_code=409,
        detail=api_error(
            code=f"AUTH_{field.upper()}_CONFLICT",
            message=f"{field.capitalize()} already exists",
            errors=[{"field": field, "message": f"{field} already exists"}],
        ),
    ) from exc


def raise_rate_limited(exc: RateLimitExceededError) -> NoReturn:
    seconds = exc.retry_after_seconds
    raise HTTPException(
        status_code=429,
        detail=api_error(code="RATE_LIMITED", message="Too many requests", retry_after=seconds),
        headers={"Retry-After": str(seconds)},
    ) from exc
