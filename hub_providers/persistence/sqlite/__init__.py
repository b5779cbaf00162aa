"""SQLite persistence backend."""

from .engine import create_connection, get_db_path, init_schema
from .kv_store import SqliteKeyValueStore

__all__ = ["SqliteKeyValueStore", "create_connection", "get_db_path", "init_schema"]
