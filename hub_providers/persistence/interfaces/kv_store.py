"""Key-value store protocol used by the credential store and model registry.

Values are opaque strings (JSON blobs in practice). Writes are synchronous
and immediately visible to subsequent reads; concurrent writers are
last-write-wins with no optimistic-concurrency check.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string blob store."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` when absent."""
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; idempotent."""
        ...


__all__ = ["KeyValueStore"]
