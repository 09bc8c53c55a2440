"""Schema bootstrap for the accounts table."""

from __future__ import annotations

from classfolio.core.db import create_sqlite_connection


CREATE_AUTH_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'staff' CHECK (role IN ('admin', 'teacher', 'staff')),
    is_active INTEGER NOT NULL DEFAULT 1,
    last_login TEXT NULL,
    refresh_tokens TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_accounts_is_active ON accounts(is_active);
CREATE INDEX IF NOT EXISTS idx_accounts_role ON accounts(role);
"""


def init_auth_schema(sqlite_path: str) -> None:
    """Ensure the accounts table and its indexes exist."""
    conn = create_sqlite_connection(sqlite_path)
    try:
        conn.executescript(CREATE_AUTH_SCHEMA_SQL)
    finally:
        conn.close()
