"""SQLite connection helpers for backend persistence."""

from __future__ import annotations

import sqlite3


def create_sqlite_connection(path: str) -> sqlite3.Connection:
    """Create a SQLite connection with foreign keys and row access by name."""
    # Autocommit mode: callers open transactions explicitly with BEGIN.
    conn = sqlite3.connect(path, timeout=5.0, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    return conn
