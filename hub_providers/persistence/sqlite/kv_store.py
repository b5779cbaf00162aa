"""SQLite-backed :class:`~hub_providers.persistence.interfaces.KeyValueStore`.

Every write commits immediately so readers never observe an
eventual-consistency window. The connection is owned by the store and
released with :meth:`SqliteKeyValueStore.close`.
"""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from .engine import create_connection, init_schema


class SqliteKeyValueStore:
    """Single-table key-value store.

    Parameters
    ----------
    db_path:
        Database file; ``None`` selects the default location and
        ``":memory:"`` an in-process database.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.conn: sqlite3.Connection = create_connection(db_path)
        init_schema(self.conn)

    def get(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Upsert ``key`` and commit."""
        self.conn.execute(
            "INSERT INTO kv(key, value, updated_at) VALUES(?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=CURRENT_TIMESTAMP",
            (key, value),
        )
        self.conn.commit()

    def delete(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()

    def keys(self) -> List[str]:
        return [r[0] for r in self.conn.execute("SELECT key FROM kv ORDER BY key")]

    def close(self) -> None:
        self.conn.close()


__all__ = ["SqliteKeyValueStore"]
