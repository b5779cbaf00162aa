"""
ModelRecord DTO: one configured (provider, model id) pairing.

Records are owned by :class:`~hub_providers.base.repositories.ModelRegistry`,
which assigns ids and timestamps and persists every mutation immediately.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .model_capabilities import ModelCapabilities
from .model_pricing import ModelPricing


@dataclass
class ModelRecord:
    """A selectable model configured by the user.

    Attributes:
        id: Generated unique id, stable across edits.
        provider_name: Owning provider key.
        model_id: Raw provider-side model identifier.
        display_name: Human label; also the tag stamped on stream chunks.
        description: Optional free text.
        priority: Lower values are tried first.
        is_active: Inactive records never participate in ranking.
        is_default: Default flag (at most one application-wide).
        capabilities: Capability flags.
        pricing: Optional price metadata.
        created_at: Epoch milliseconds.
        updated_at: Epoch milliseconds of the last mutation.
    """

    id: str
    provider_name: str
    model_id: str
    display_name: str
    description: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    is_default: bool = False
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)
    pricing: Optional[ModelPricing] = None
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serializable storage form."""
        data: Dict[str, Any] = {
            "id": self.id,
            "provider_name": self.provider_name,
            "model_id": self.model_id,
            "display_name": self.display_name,
            "priority": self.priority,
            "is_active": self.is_active,
            "is_default": self.is_default,
            "capabilities": self.capabilities.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.pricing is not None:
            data["pricing"] = self.pricing.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelRecord":
        """Rebuild a record from its storage form; missing optionals take defaults."""
        return cls(
            id=str(data["id"]),
            provider_name=str(data["provider_name"]),
            model_id=str(data["model_id"]),
            display_name=str(data.get("display_name") or data["model_id"]),
            description=data.get("description"),
            priority=int(data.get("priority", 0)),
            is_active=bool(data.get("is_active", True)),
            is_default=bool(data.get("is_default", False)),
            capabilities=ModelCapabilities.from_dict(data.get("capabilities")),
            pricing=ModelPricing.from_dict(data.get("pricing")),
            created_at=int(data.get("created_at", 0)),
            updated_at=int(data.get("updated_at", 0)),
        )


def rank_active(records: Iterable[ModelRecord]) -> List[ModelRecord]:
    """Active records ascending by priority; ties keep their input order."""
    return sorted((r for r in records if r.is_active), key=lambda r: r.priority)


__all__ = ["ModelRecord", "rank_active"]
