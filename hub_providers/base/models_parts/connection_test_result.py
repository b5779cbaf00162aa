"""
ConnectionTestResult DTO returned by ``ProviderStrategy.test_connection``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ConnectionTestResult:
    """Outcome of a minimal round-trip request against a provider.

    Attributes:
        success: Whether the provider answered as expected.
        latency_ms: End-to-end latency in whole milliseconds.
        detail: Human-readable message on success (e.g. the model answering).
        error: Failure reason; non-empty whenever ``success`` is False.
        tested_at: Epoch milliseconds when the result was recorded.
    """

    success: bool
    latency_ms: int = 0
    detail: Optional[str] = None
    error: Optional[str] = None
    tested_at: Optional[int] = None

    @classmethod
    def failure(cls, error: str, latency_ms: int = 0) -> "ConnectionTestResult":
        return cls(success=False, latency_ms=latency_ms, error=error or "Unknown error")

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionTestResult":
        return cls(
            success=bool(data.get("success", False)),
            latency_ms=int(data.get("latency_ms", 0) or 0),
            detail=data.get("detail"),
            error=data.get("error"),
            tested_at=data.get("tested_at"),
        )


__all__ = ["ConnectionTestResult"]
