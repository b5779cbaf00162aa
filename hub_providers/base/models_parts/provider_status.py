"""
ProviderStatus read-only view aggregated from credentials and the registry.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .connection_test_result import ConnectionTestResult


@dataclass(frozen=True)
class ProviderStatus:
    """Derived status of one provider; never persisted as a whole."""

    name: str
    display_name: str
    has_key: bool
    has_active_model: bool
    model_count: int
    last_test: Optional[ConnectionTestResult] = None


__all__ = ["ProviderStatus"]
