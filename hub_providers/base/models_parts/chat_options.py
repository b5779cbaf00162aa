"""
Per-request chat options shared by every adapter.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..cancellation import CancellationToken


@dataclass
class ChatOptions:
    """Optional generation parameters.

    Adapters forward only the fields their provider understands.
    ``web_search`` enables the grounding tool on providers that have one.
    ``cancellation`` is polled between frames and between attempts.
    """

    system_instruction: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stop_sequences: List[str] = field(default_factory=list)
    web_search: bool = False
    cancellation: Optional[CancellationToken] = None

    def raise_if_cancelled(self) -> None:
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled()


__all__ = ["ChatOptions"]
