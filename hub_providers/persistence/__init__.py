"""Persistence layer: key-value store contract and its backends."""

from .interfaces import KeyValueStore
from .memory import InMemoryKeyValueStore
from .sqlite import SqliteKeyValueStore

__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "SqliteKeyValueStore"]
