"""Per-application runtime state shared by request handlers."""

from __future__ import annotations

from dataclasses import dataclass

from classfolio.auth.repository import AccountRepository
from classfolio.auth.schema import init_auth_schema
from classfolio.core.config import Settings
from classfolio.core.password import PasswordHasher
from classfolio.core.rate_limit import RateLimitPolicy
from classfolio.core.rate_limit import RateLimiters
from classfolio.core.rate_limit import build_rate_limiters
from classfolio.core.tokens import TokenIssuer


@dataclass(slots=True)
class AppRuntime:
    """Handles created once at startup and passed to every flow."""

    settings: Settings
    accounts: AccountRepository
    passwords: PasswordHasher
    tokens: TokenIssuer
    limiters: RateLimiters


def build_runtime(settings: Settings) -> AppRuntime:
    return AppRuntime(
        settings=settings,
        accounts=AccountRepository(
            settings.classfolio_sqlite_path,
            max_refresh_tokens=settings.classfolio_max_refresh_tokens,
        ),
        passwords=PasswordHasher(rounds=settings.classfolio_bcrypt_rounds),
        tokens=TokenIssuer(
            access_secret=settings.classfolio_jwt_access_secret,
            refresh_secret=settings.classfolio_jwt_refresh_secret,
            access_expires_in_seconds=settings.classfolio_access_token_expire_seconds,
            refresh_expires_in_seconds=settings.classfolio_refresh_token_expire_seconds,
        ),
        limiters=build_rate_limiters(
            api=RateLimitPolicy(
                settings.classfolio_api_rate_limit_points,
                settings.classfolio_api_rate_limit_seconds,
            ),
            auth=RateLimitPolicy(
                settings.classfolio_auth_rate_limit_points,
                settings.classfolio_auth_rate_limit_seconds,
            ),
            create=RateLimitPolicy(
                settings.classfolio_create_rate_limit_points,
                settings.classfolio_create_rate_limit_seconds,
            ),
        ),
    )


def startup(runtime: AppRuntime) -> None:
    """Ensure the accounts schema exists before handling traffic."""
    init_auth_schema(runtime.accounts.sqlite_path)
