"""Auth business logic for register/login/refresh/logout/change-password."""

from __future__ import annotations

import logging
import math
import sqlite3
from typing import TYPE_CHECKING

from classfolio.auth.errors import raise_account_not_found
from classfolio.auth.errors import raise_conflict
from classfolio.auth.errors import raise_forbidden
from classfolio.auth.errors import raise_inactive_account
from classfolio.auth.errors import raise_invalid_credentials
from classfolio.auth.errors import raise_refresh_rejected
from classfolio.auth.errors import raise_token_expired
from classfolio.auth.errors import raise_token_invalid
from classfolio.auth.errors import raise_validation_error
from classfolio.auth.errors import raise_wrong_current_password
from classfolio.auth.models import ChangePasswordRequest
from classfolio.auth.models import LoginRequest
from classfolio.auth.models import LogoutRequest
from classfolio.auth.models import RefreshRequest
from classfolio.auth.models import RegisterRequest
from classfolio.auth.models import UpdateProfileRequest
from classfolio.auth.repository import Account
from classfolio.auth.repository import normalize_email
from classfolio.auth.session import issue_auth_session
from classfolio.auth.session import to_utc_iso
from classfolio.auth.session import token_pair
from classfolio.auth.session import utc_now
from classfolio.core.tokens import TokenExpiredError
from classfolio.core.tokens import TokenInvalidError
from classfolio.core.tokens import TokenKind

if TYPE_CHECKING:
    from classfolio.runtime import AppRuntime

logger = logging.getLogger(__name__)


def _conflict_field(exc: sqlite3.IntegrityError) -> str:
    return "email" if "accounts.email" in str(exc) else "username"


def register_account(*, runtime: AppRuntime, payload: RegisterRequest) -> dict[str, object]:
    """Create an account and its first auth session."""
    username = payload.username.strip()
    conflict = runtime.accounts.find_conflicting_field(username=username, email=payload.email)
    if conflict is not None:
        raise_conflict(conflict)

    now = utc_now()
    password_hash = runtime.passwords.hash(payload.password)
    try:
        account = runtime.accounts.create_account(
            username=username,
            email=payload.email,
            password_hash=password_hash,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            role=payload.role,
            created_at=to_utc_iso(now),
        )
    except sqlite3.IntegrityError as exc:
        # Lost a race with a concurrent registration for the same name/email.
        raise_conflict(_conflict_field(exc), exc)

    logger.info("registered account id=%s username=%s role=%s", account.id, username, account.role)
    return issue_auth_session(runtime, account, now=now)


def login_account(*, runtime: AppRuntime, payload: LoginRequest) -> dict[str, object]:
    """Authenticate by username/password and issue a fresh auth session."""
    row = runtime.accounts.get_credentials_by_username(payload.username)
    if row is None:
        logger.info("login failed: unknown username=%s", payload.username)
        raise_invalid_credentials()

    account, password_hash = row
    if not account.is_active:
        logger.info("login failed: inactive account id=%s", account.id)
        raise_invalid_credentials()

    if not runtime.passwords.verify(payload.password, password_hash):
        logger.info("login failed: wrong password for account id=%s", account.id)
        raise_invalid_credentials()

    logger.info("login succeeded for account id=%s", account.id)
    return issue_auth_session(runtime, account, now=utc_now(), record_login=True)


def refresh_session(*, runtime: AppRuntime, payload: RefreshRequest) -> dict[str, object]:
    """Rotate a refresh token and return a new access/refresh pair."""
    old_token = payload.refresh_token
    if not old_token:
        raise_validation_error("Refresh token is required", field="refresh_token")

    now = utc_now()
    try:
        claims = runtime.tokens.verify(old_token, TokenKind.REFRESH, now=now)
    except Exception as exc:  # any verification failure means the same 401
        logger.info("refresh rejected: %s", exc)
        raise_refresh_rejected()

    account = runtime.accounts.get_account(claims.subject)
    if account is None or not account.is_active:
        logger.info("refresh rejected: missing or inactive account id=%s", claims.subject)
        raise_refresh_rejected()

    access_token = runtime.tokens.issue_access_token(account.id, now=now)
    new_token = runtime.tokens.issue_refresh_token(account.id, now=now)
    rotated = runtime.accounts.rotate_refresh_token(
        account.id,
        old_token,
        new_token,
        updated_at=to_utc_iso(now),
    )
    if not rotated:
        logger.warning("refresh rejected: token not in session list for account id=%s", account.id)
        raise_refresh_rejected()

    return token_pair(runtime, access_token=access_token, refresh_token=new_token)


def logout_session(*, runtime: AppRuntime, account: Account, payload: LogoutRequest) -> None:
    """Drop one refresh token from the caller's session list; always succeeds."""
    if not payload.refresh_token:
        return
    runtime.accounts.remove_refresh_token(
        account.id,
        payload.refresh_token,
        updated_at=to_utc_iso(utc_now()),
    )
    logger.info("logout for account id=%s", account.id)


def change_password(*, runtime: AppRuntime, account: Account, payload: ChangePasswordRequest) -> None:
    """Verify the current password, store the new hash and end every session."""
    row = runtime.accounts.get_credentials_by_id(account.id)
    if row is None:
        raise_account_not_found()

    _, password_hash = row
    if not runtime.passwords.verify(payload.current_password, password_hash):
        raise_wrong_current_password()

    new_hash = runtime.passwords.hash(payload.new_password)
    if not runtime.accounts.update_password_hash(account.id, new_hash, updated_at=to_utc_iso(utc_now())):
        raise_account_not_found()
    logger.info("password changed for account id=%s; all refresh tokens revoked", account.id)


def current_account(*, runtime: AppRuntime, access_token: str) -> Account:
    """Resolve an access token to an active account."""
    try:
        claims = runtime.tokens.verify(access_token, TokenKind.ACCESS, now=utc_now())
    except TokenExpiredError:
        raise_token_expired()
    except TokenInvalidError:
        raise_token_invalid()

    account = runtime.accounts.get_account(claims.subject)
    if account is None or not account.is_active:
        raise_inactive_account()
    return account


def ensure_role(account: Account, roles: tuple[str, ...]) -> None:
    if account.role not in roles:
        raise_forbidden()


def update_profile(*, runtime: AppRuntime, account: Account, payload: UpdateProfileRequest) -> Account:
    """Update names and/or email of the caller."""
    email = payload.email
    if email is not None and normalize_email(email) != account.email:
        if runtime.accounts.find_conflicting_field(email=email, exclude_id=account.id):
            raise_conflict("email")

    try:
        updated = runtime.accounts.update_profile(
            account.id,
            updated_at=to_utc_iso(utc_now()),
            first_name=None if payload.first_name is None else payload.first_name.strip(),
            last_name=None if payload.last_name is None else payload.last_name.strip(),
            email=email,
        )
    except sqlite3.IntegrityError as exc:
        raise_conflict("email", exc)

    if updated is None:
        raise_account_not_found()
    return updated


def list_accounts(
    *,
    runtime: AppRuntime,
    role: str | None,
    is_active: bool | None,
    page: int,
    limit: int,
) -> tuple[list[Account], dict[str, int]]:
    """Return one page of accounts and its pagination block."""
    accounts, total = runtime.accounts.list_accounts(
        role=role,
        is_active=is_active,
        offset=(page - 1) * limit,
        limit=limit,
    )
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }
    return accounts, pagination
