"""Input validation DTOs (pydantic)."""

from .chat import AttachmentDTO, ChatMessageDTO, ChatRequestDTO, validate_messages
from .model_form import CapabilitiesDTO, FallbackConfigDTO, ModelFormDTO, PricingDTO

__all__ = [
    "AttachmentDTO",
    "ChatMessageDTO",
    "ChatRequestDTO",
    "validate_messages",
    "CapabilitiesDTO",
    "PricingDTO",
    "ModelFormDTO",
    "FallbackConfigDTO",
]
