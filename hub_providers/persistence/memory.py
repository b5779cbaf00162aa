"""Dict-backed :class:`KeyValueStore` for tests and ephemeral runs."""

from __future__ import annotations

from typing import Dict, Optional


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


__all__ = ["InMemoryKeyValueStore"]
