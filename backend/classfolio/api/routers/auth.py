"""Auth REST routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query

from classfolio.api.deps import api_rate_limit
from classfolio.api.deps import auth_rate_limit
from classfolio.api.deps import create_rate_limit
from classfolio.api.deps import get_runtime
from classfolio.api.deps import require_current_user
from classfolio.api.deps import require_roles
from classfolio.auth.http import api_success
from classfolio.auth.models import ChangePasswordRequest
from classfolio.auth.models import LoginRequest
from classfolio.auth.models import LogoutRequest
from classfolio.auth.models import RefreshRequest
from classfolio.auth.models import RegisterRequest
from classfolio.auth.models import Role
from classfolio.auth.models import UpdateProfileRequest
from classfolio.auth.repository import Account
from classfolio.auth.service import change_password
from classfolio.auth.service import list_accounts
from classfolio.auth.service import login_account
from classfolio.auth.service import logout_session
from classfolio.auth.service import refresh_session
from classfolio.auth.service import register_account
from classfolio.auth.service import update_profile
from classfolio.runtime import AppRuntime

router = APIRouter(prefix="/api/auth", dependencies=[Depends(api_rate_limit)])


@router.post(
    "/register",
    status_code=201,
    dependencies=[Depends(auth_rate_limit), Depends(create_rate_limit)],
)
def register(payload: RegisterRequest, runtime: AppRuntime = Depends(get_runtime)) -> dict[str, object]:
    """Create an account and return it with a fresh token pair."""
    session = register_account(runtime=runtime, payload=payload)
    return api_success(session, message="User registered successfully")


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
def login(payload: LoginRequest, runtime: AppRuntime = Depends(get_runtime)) -> dict[str, object]:
    session = login_account(runtime=runtime, payload=payload)
    return api_success(session, message="Login successful")


@router.post("/refresh")
def refresh(payload: RefreshRequest, runtime: AppRuntime = Depends(get_runtime)) -> dict[str, object]:
    """Rotate refresh token and issue a new access/refresh pair."""
    pair = refresh_session(runtime=runtime, payload=payload)
    return api_success(pair, message="Token refreshed successfully")


@router.post("/logout")
def logout(
    payload: LogoutRequest,
    account: Account = Depends(require_current_user),
    runtime: AppRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Revoke the provided refresh token idempotently."""
    logout_session(runtime=runtime, account=account, payload=payload)
    return api_success(None, message="Logout successful")


@router.put("/change-password")
def change_password_route(
    payload: ChangePasswordRequest,
    account: Account = Depends(require_current_user),
    runtime: AppRuntime = Depends(get_runtime),
) -> dict[str, object]:
    change_password(runtime=runtime, account=account, payload=payload)
    return api_success(None, message="Password changed successfully")


@router.get("/profile")
def profile(account: Account = Depends(require_current_user)) -> dict[str, object]:
    return api_success(account.to_public(), message="Profile retrieved successfully")


@router.put("/profile")
def update_profile_route(
    payload: UpdateProfileRequest,
    account: Account = Depends(require_current_user),
    runtime: AppRuntime = Depends(get_runtime),
) -> dict[str, object]:
    updated = update_profile(runtime=runtime, account=account, payload=payload)
    return api_success(updated.to_public(), message="Profile updated successfully")


@router.get("/users", dependencies=[Depends(require_roles("admin"))])
def users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    role: Role | None = None,
    is_active: bool = True,
    runtime: AppRuntime = Depends(get_runtime),
) -> dict[str, object]:
    """Admin-only account listing, newest first."""
    accounts, pagination = list_accounts(
        runtime=runtime,
        role=role,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return api_success(
        [account.to_public() for account in accounts],
        message="Users retrieved successfully",
        pagination=pagination,
    )
