"""SQLite engine helpers for the persistence layer.

Purpose
-------
Open SQLite connections with centralized PRAGMA settings and ensure the
schema exists.

Reliability strategy
--------------------
- Applies ``busy_timeout`` (milliseconds) from ``hub_providers.config.defaults``
  to mitigate lock contention.
- Enables WAL journaling and NORMAL synchronous mode.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from ...config.defaults import (
    SQLITE_BUSY_TIMEOUT_MS,
    SQLITE_JOURNAL_MODE,
    SQLITE_SYNCHRONOUS,
)

DEFAULT_DB_PATH = Path("~/.hub_providers/providers.db")


def get_db_path(db_path: Optional[str] = None) -> Path:
    """Return a concrete database file path (``~`` expanded, not created yet)."""
    return Path(db_path or DEFAULT_DB_PATH).expanduser()


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a SQLite connection and apply PRAGMA settings.

    The parent directory is created when missing. ``":memory:"`` is passed
    through untouched.
    """
    if db_path == ":memory:":
        conn = sqlite3.connect(db_path)
    else:
        path = get_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
    conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
    conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the ``kv`` table if missing, then commit."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )
    conn.commit()


__all__ = ["DEFAULT_DB_PATH", "get_db_path", "create_connection", "init_schema"]
