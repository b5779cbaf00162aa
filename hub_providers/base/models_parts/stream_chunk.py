"""
Unified streaming response format.

``text`` and ``reasoning`` are cumulative: each chunk carries everything
produced so far, not a delta.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional


@dataclass(frozen=True)
class GroundingSource:
    """A web citation returned alongside grounded output."""

    title: str
    uri: str


@dataclass(frozen=True)
class StreamChunk:
    """One snapshot of a streaming answer.

    Attributes:
        text: Cumulative answer text.
        reasoning: Cumulative reasoning channel text, when the provider has one.
        sources: Grounding citations, when present.
        is_complete: Set on the final chunk of a stream.
        model_used: Display name of the producing model; set by the fallback
            orchestrator only.
    """

    text: str = ""
    reasoning: Optional[str] = None
    sources: Optional[List[GroundingSource]] = None
    is_complete: bool = False
    model_used: Optional[str] = None

    def with_model(self, name: str) -> "StreamChunk":
        return replace(self, model_used=name)


__all__ = ["GroundingSource", "StreamChunk"]
