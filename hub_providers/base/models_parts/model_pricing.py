"""
ModelPricing metadata (price per million tokens).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ModelPricing:
    input_per_million: Optional[float] = None
    output_per_million: Optional[float] = None
    currency: str = "USD"

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ModelPricing"]:
        if not data:
            return None
        return cls(
            input_per_million=data.get("input_per_million"),
            output_per_million=data.get("output_per_million"),
            currency=data.get("currency") or "USD",
        )


__all__ = ["ModelPricing"]
