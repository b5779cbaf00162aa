"""
Pydantic DTOs for the add-model form and fallback settings.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CapabilitiesDTO(BaseModel):
    supports_vision: Optional[bool] = None
    supports_tools: Optional[bool] = None
    supports_streaming: Optional[bool] = None
    supports_reasoning: Optional[bool] = None
    context_window: Optional[int] = Field(default=None, ge=1)
    max_output_tokens: Optional[int] = Field(default=None, ge=1)


class PricingDTO(BaseModel):
    input_per_million: Optional[float] = Field(default=None, ge=0)
    output_per_million: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"


class ModelFormDTO(BaseModel):
    """Fields accepted when adding a model.

    ``provider_name`` and ``model_id`` are stripped and must be non-empty.
    """

    provider_name: str
    model_id: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True
    is_default: bool = False
    capabilities: CapabilitiesDTO = Field(default_factory=CapabilitiesDTO)
    pricing: Optional[PricingDTO] = None

    @field_validator("provider_name", "model_id")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("display_name")
    @classmethod
    def _strip_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class FallbackConfigDTO(BaseModel):
    max_retries: int = Field(ge=0, le=10)
    retry_delay_ms: int = Field(ge=0)
    enable_fallback: bool


__all__ = ["CapabilitiesDTO", "PricingDTO", "ModelFormDTO", "FallbackConfigDTO"]
