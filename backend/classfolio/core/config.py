"""Application settings for backend runtime and tests."""

from __future__ import annotations

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    classfolio_app_env: str = "dev"
    classfolio_app_host: str = "127.0.0.1"
    classfolio_app_port: int = Field(default=8000, ge=1)
    classfolio_log_level: str = "INFO"

    classfolio_sqlite_path: str = "classfolio.db"
    classfolio_cors_allow_origins: str = "http://localhost:8080"

    classfolio_jwt_access_secret: str = Field(min_length=32)
    classfolio_jwt_refresh_secret: str = Field(min_length=32)
    classfolio_access_token_expire_seconds: int = Field(default=7 * 24 * 3600, ge=1)
    classfolio_refresh_token_expire_seconds: int = Field(default=30 * 24 * 3600, ge=1)

    classfolio_bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    # 0 keeps every issued refresh token until logout/rotation/password change.
    classfolio_max_refresh_tokens: int = Field(default=0, ge=0)

    classfolio_api_rate_limit_points: int = Field(default=100, ge=1)
    classfolio_api_rate_limit_seconds: int = Field(default=900, ge=1)
    classfolio_auth_rate_limit_points: int = Field(default=5, ge=1)
    classfolio_auth_rate_limit_seconds: int = Field(default=900, ge=1)
    classfolio_create_rate_limit_points: int = Field(default=10, ge=1)
    classfolio_create_rate_limit_seconds: int = Field(default=3600, ge=1)

    @model_validator(mode="after")
    def validate_token_policy(self) -> "Settings":
        """Keep the two token kinds cryptographically and temporally distinct."""
        if self.classfolio_jwt_access_secret == self.classfolio_jwt_refresh_secret:
            raise ValueError(
                "CLASSFOLIO_JWT_REFRESH_SECRET must differ from CLASSFOLIO_JWT_ACCESS_SECRET"
            )
        if (
            self.classfolio_refresh_token_expire_seconds
            <= self.classfolio_access_token_expire_seconds
        ):
            raise ValueError(
                "CLASSFOLIO_REFRESH_TOKEN_EXPIRE_SECONDS must be greater than "
                "CLASSFOLIO_ACCESS_TOKEN_EXPIRE_SECONDS"
            )
        return self

    @property
    def cors_allow_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.classfolio_cors_allow_origins.split(",")
            if origin.strip()
        ]


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
