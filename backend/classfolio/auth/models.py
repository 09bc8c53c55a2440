"""Pydantic models for auth requests."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel
from pydantic import Field

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
MIN_PASSWORD_LENGTH = 6

Role = Literal["admin", "teacher", "staff"]


class RegisterRequest(BaseModel):
    """POST /api/auth/register request body."""

    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    role: Role = "staff"


class LoginRequest(BaseModel):
    """POST /api/auth/login request body."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """POST /api/auth/refresh request body."""

    refresh_token: str | None = None


class LogoutRequest(BaseModel):
    """POST /api/auth/logout request body."""

    refresh_token: str | None = None


class ChangePasswordRequest(BaseModel):
    """PUT /api/auth/change-password request body."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UpdateProfileRequest(BaseModel):
    """PUT /api/auth/profile request body."""

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
