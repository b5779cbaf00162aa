"""
RemoteModelInfo DTO returned by model catalog listings.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .model_pricing import ModelPricing


@dataclass(frozen=True)
class RemoteModelInfo:
    """A model advertised by a provider's catalog endpoint (discovery only)."""

    id: str
    name: str
    context_length: Optional[int] = None
    pricing: Optional[ModelPricing] = None


__all__ = ["RemoteModelInfo"]
