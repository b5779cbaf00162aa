"""Cooperative cancellation token for chat streams."""

from __future__ import annotations

from threading import Lock
from typing import List, Optional

from .cancelled_error import CancelledError


class CancellationToken:
    """Lets a caller abandon an in-flight chat.

    The orchestrator checks the token before every attempt and adapters check
    it after every content-bearing frame. A token made with :meth:`child`
    is cancelled together with its parent, so one UI "stop" can end several
    streams. The first reason given wins.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._reason: Optional[str] = None
        self._cancelled = False
        self._children: List["CancellationToken"] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Request cancellation; returns False when it was already requested."""
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled, self._reason = True, reason
            children, self._children = self._children, []
        for child in children:
            child.cancel(reason)
        return True

    def child(self) -> "CancellationToken":
        """New token cancelled with this one (immediately if already cancelled)."""
        token = CancellationToken()
        with self._lock:
            if not self._cancelled:
                self._children.append(token)
                return token
        token.cancel(self._reason)
        return token

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancelledError(self._reason)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken"]
