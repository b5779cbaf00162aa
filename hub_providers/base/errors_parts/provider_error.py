"""
Structured provider error exception type.

Raised by adapters for transport failures, non-2xx responses and
provider-reported error bodies. The orchestrator records these per attempt
and retries them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for display.
        provider: Provider key where the error originated (e.g., ``"openrouter"``).
        model: Optional model identifier associated with the failure.
        status: Optional HTTP status code returned by the provider.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    status: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


__all__ = ["ProviderError"]
