"""Cancellation error type.

Raised when a chat stream observes a cancelled :class:`CancellationToken`.
The fallback orchestrator never retries it.
"""

from __future__ import annotations

from typing import Optional

DEFAULT_CANCEL_REASON = "Chat cancelled"


class CancelledError(RuntimeError):
    """A chat stream stopped because its caller asked it to.

    Distinct from :class:`asyncio.CancelledError`: this one is requested by the
    caller through a token, not by task cancellation. ``reason`` is the text
    passed to :meth:`CancellationToken.cancel`, if any.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        super().__init__(reason or DEFAULT_CANCEL_REASON)


__all__ = ["CancelledError", "DEFAULT_CANCEL_REASON"]
