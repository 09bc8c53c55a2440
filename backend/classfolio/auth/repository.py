"""Persistence helpers for account and session workflows."""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from classfolio.core.db import create_sqlite_connection

ROLES = ("admin", "teacher", "staff")

_PUBLIC_COLUMNS = (
    "id, username, email, first_name, last_name, role, is_active, last_login, created_at, updated_at"
)


@dataclass(slots=True)
class Account:
    """Account profile without credential hash or session tokens."""

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    last_login: str | None
    created_at: str
    updated_at: str

    def to_public(self) -> dict[str, object]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_active": self.is_active,
            "last_login": self.last_login,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _account_from_row(row: sqlite3.Row) -> Account:
    return Account(
        id=str(row["id"]),
        username=str(row["username"]),
        email=str(row["email"]),
        first_name=str(row["first_name"]),
        last_name=str(row["last_name"]),
        role=str(row["role"]),
        is_active=bool(row["is_active"]),
        last_login=row["last_login"],
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


class AccountRepository:
    """Account store backed by one SQLite file.

    The refresh-token list is embedded in the account row as a JSON array,
    oldest first. Every token mutation is a read-modify-write under
    ``BEGIN IMMEDIATE`` so concurrent writers on the same file serialize.
    """

    def __init__(self, sqlite_path: str, *, max_refresh_tokens: int = 0) -> None:
        self.sqlite_path = sqlite_path
        self.max_refresh_tokens = max_refresh_tokens

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = create_sqlite_connection(self.sqlite_path)
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self, *, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        with self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()

    # -- accounts -----------------------------------------------------------

    def create_account(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: str,
        created_at: str,
    ) -> Account:
        """Insert an account with an empty session list.

        Raises ``sqlite3.IntegrityError`` when username or email is taken.
        """
        account_id = uuid.uuid4().hex
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO accounts (
                    id, username, email, password_hash, first_name, last_name,
                    role, is_active, last_login, refresh_tokens, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, 1, NULL, '[]', ?, ?)
                """,
                (
                    account_id,
                    username,
                    normalize_email(email),
                    password_hash,
                    first_name,
                    last_name,
                    role,
                    created_at,
                    created_at,
                ),
            )
        return Account(
            id=account_id,
            username=username,
            email=normalize_email(email),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
            last_login=None,
            created_at=created_at,
            updated_at=created_at,
        )

    def find_conflicting_field(
        self,
        *,
        username: str | None = None,
        email: str | None = None,
        exclude_id: str | None = None,
    ) -> str | None:
        """Return ``"username"`` or ``"email"`` if another account already uses it."""
        with self._connection() as conn:
            if username is not None:
                row = conn.execute(
                    "SELECT id FROM accounts WHERE username = ? AND id IS NOT ?",
                    (username, exclude_id),
                ).fetchone()
                if row is not None:
                    return "username"
            if email is not None:
                row = conn.execute(
                    "SELECT id FROM accounts WHERE email = ? AND id IS NOT ?",
                    (normalize_email(email), exclude_id),
                ).fetchone()
                if row is not None:
                    return "email"
        return None

    def get_account(self, account_id: str) -> Account | None:
        """Fetch an account without its password hash or refresh tokens."""
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_PUBLIC_COLUMNS} FROM accounts WHERE id = ?",
                (account_id,),
            ).fetchone()
        return None if row is None else _account_from_row(row)

    def get_credentials_by_username(self, username: str) -> tuple[Account, str] | None:
        """Fetch account plus password hash for login."""
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_PUBLIC_COLUMNS}, password_hash FROM accounts WHERE username = ?",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return _account_from_row(row), str(row["password_hash"])

    def get_credentials_by_id(self, account_id: str) -> tuple[Account, str] | None:
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_PUBLIC_COLUMNS}, password_hash FROM accounts WHERE id = ?",
                (account_id,),
            ).fetchone()
        if row is None:
            return None
        return _account_from_row(row), str(row["password_hash"])

    def update_profile(
        self,
        account_id: str,
        *,
        updated_at: str,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> Account | None:
        """Apply the provided profile fields; ``None`` leaves a field unchanged."""
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE accounts
                SET first_name = COALESCE(?, first_name),
                    last_name = COALESCE(?, last_name),
                    email = COALESCE(?, email),
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    first_name,
                    last_name,
                    None if email is None else normalize_email(email),
                    updated_at,
                    account_id,
                ),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_account(account_id)

    def set_active(self, account_id: str, is_active: bool, *, updated_at: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE accounts SET is_active = ?, updated_at = ? WHERE id = ?",
                (1 if is_active else 0, updated_at, account_id),
            )
            return cursor.rowcount > 0

    def update_password_hash(self, account_id: str, password_hash: str, *, updated_at: str) -> bool:
        """Store a new hash and drop every refresh token in the same write."""
        with self._transaction(immediate=True) as conn:
            cursor = conn.execute(
                """
                UPDATE accounts
                SET password_hash = ?, refresh_tokens = '[]', updated_at = ?
                WHERE id = ?
                """,
                (password_hash, updated_at, account_id),
            )
            return cursor.rowcount > 0

    def list_accounts(
        self,
        *,
        role: str | None,
        is_active: bool | None,
        offset: int,
        limit: int,
    ) -> tuple[list[Account], int]:
        """Return one page of accounts, newest first, plus the total match count."""
        clauses: list[str] = []
        params: list[object] = []
        if role is not None:
            clauses.append("role = ?")
            params.append(role)
        if is_active is not None:
            clauses.append("is_active = ?")
            params.append(1 if is_active else 0)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM accounts {where}", params).fetchone()[0]
            rows = conn.execute(
                f"""
                SELECT {_PUBLIC_COLUMNS} FROM accounts {where}
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            ).fetchall()
        return [_account_from_row(row) for row in rows], int(total)

    # -- refresh-token list ---------------------------------------------------

    @staticmethod
    def _load_tokens(conn: sqlite3.Connection, account_id: str) -> list[str] | None:
        row = conn.execute(
            "SELECT refresh_tokens FROM accounts WHERE id = ?",
            (account_id,),
        ).fetchone()
        if row is None:
            return None
        return list(json.loads(row["refresh_tokens"]))

    @staticmethod
    def _store_tokens(
        conn: sqlite3.Connection,
        account_id: str,
        tokens: list[str],
        *,
        updated_at: str,
        last_login: str | None = None,
    ) -> None:
        conn.execute(
            """
            UPDATE accounts
            SET refresh_tokens = ?, last_login = COALESCE(?, last_login), updated_at = ?
            WHERE id = ?
            """,
            (json.dumps(tokens), last_login, updated_at, account_id),
        )

    def _apply_cap(self, tokens: list[str]) -> list[str]:
        if self.max_refresh_tokens and len(tokens) > self.max_refresh_tokens:
            return tokens[-self.max_refresh_tokens :]
        return tokens

    def list_refresh_tokens(self, account_id: str) -> list[str] | None:
        with self._connection() as conn:
            return self._load_tokens(conn, account_id)

    def contains_refresh_token(self, account_id: str, token: str) -> bool:
        tokens = self.list_refresh_tokens(account_id)
        return tokens is not None and token in tokens

    def append_refresh_token(
        self,
        account_id: str,
        token: str,
        *,
        updated_at: str,
        last_login: str | None = None,
    ) -> bool:
        """Append token (and optionally stamp last_login) in one commit."""
        with self._transaction(immediate=True) as conn:
            tokens = self._load_tokens(conn, account_id)
            if tokens is None:
                return False
            tokens.append(token)
            self._store_tokens(
                conn,
                account_id,
                self._apply_cap(tokens),
                updated_at=updated_at,
                last_login=last_login,
            )
            return True

    def rotate_refresh_token(
        self,
        account_id: str,
        old_token: str,
        new_token: str,
        *,
        updated_at: str,
    ) -> bool:
        """Swap old_token for new_token only if old_token is still present.

        Returns False when the account is gone or old_token was already
        removed; in that case nothing is written.
        """
        with self._transaction(immediate=True) as conn:
            tokens = self._load_tokens(conn, account_id)
            if tokens is None or old_token not in tokens:
                return False
            tokens.remove(old_token)
            tokens.append(new_token)
            self._store_tokens(conn, account_id, self._apply_cap(tokens), updated_at=updated_at)
            return True

    def remove_refresh_token(self, account_id: str, token: str, *, updated_at: str) -> None:
        """Remove the first exact match; absent tokens are ignored."""
        with self._transaction(immediate=True) as conn:
            tokens = self._load_tokens(conn, account_id)
            if tokens is None or token not in tokens:
                return
            tokens.remove(token)
            self._store_tokens(conn, account_id, tokens, updated_at=updated_at)

    def clear_refresh_tokens(self, account_id: str, *, updated_at: str) -> None:
        with self._transaction(immediate=True) as conn:
            conn.execute(
                "UPDATE accounts SET refresh_tokens = '[]', updated_at = ? WHERE id = ?",
                (updated_at, account_id),
            )
