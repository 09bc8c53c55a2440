"""Dependency helpers shared by API routers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Depends
from fastapi import Header
from fastapi import Request

from classfolio.auth.errors import raise_rate_limited
from classfolio.auth.errors import raise_token_missing
from classfolio.auth.repository import Account
from classfolio.auth.service import current_account
from classfolio.auth.service import ensure_role
from classfolio.core.rate_limit import RateLimitExceededError
from classfolio.core.rate_limit import RateLimiter
from classfolio.runtime import AppRuntime

logger = logging.getLogger(__name__)


def get_runtime(request: Request) -> AppRuntime:
    return request.app.state.runtime


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _consume(request: Request, limiter: RateLimiter) -> None:
    key = client_key(request)
    try:
        limiter.consume(key)
    except RateLimitExceededError as exc:
        logger.warning(
            "rate limit %s exceeded for %s on %s; retry in %ss",
            limiter.name,
            key,
            request.url.path,
            exc.retry_after_seconds,
        )
        raise_rate_limited(exc)


def api_rate_limit(request: Request) -> None:
    """General traffic limiter applied to every auth route."""
    _consume(request, get_runtime(request).limiters.api)


def auth_rate_limit(request: Request) -> None:
    """Credential-attempt limiter for register/login."""
    _consume(request, get_runtime(request).limiters.auth)


def create_rate_limit(request: Request) -> None:
    """Creation limiter for routes that create records."""
    _consume(request, get_runtime(request).limiters.create)


def require_current_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Account:
    """Read and validate Bearer access token from Authorization header."""
    if authorization is None:
        raise_token_missing()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise_token_missing()

    account = current_account(runtime=get_runtime(request), access_token=token.strip())
    request.state.account = account
    return account


def require_roles(*roles: str) -> Callable[..., Account]:
    """Build a dependency that also rejects accounts whose role is not listed."""

    def dependency(account: Account = Depends(require_current_user)) -> Account:
        ensure_role(account, roles)
        return account

    return dependency
