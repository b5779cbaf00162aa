"""
Aggregate failure raised when every fallback candidate is exhausted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ModelFailure:
    """Terminal failure reason recorded for one candidate model."""

    model: str
    error: str


class AllModelsFailedError(Exception):
    """Consolidated error listing every attempted candidate and its last error.

    The message is meant to be shown verbatim as the assistant's reply.
    """

    def __init__(self, failures: List[ModelFailure]) -> None:
        self.failures = list(failures)
        summary = "\n".join(f"• {f.model}: {f.error}" for f in self.failures)
        super().__init__(f"All models failed:\n{summary}")


__all__ = ["ModelFailure", "AllModelsFailedError"]
