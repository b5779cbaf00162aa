"""
Provider-agnostic domain models public surface.

Re-exports the one-class-per-file implementations under
``hub_providers.base.models_parts``.
"""

from .models_parts.provider_descriptor import ProviderDescriptor
from .models_parts.connection_test_result import ConnectionTestResult
from .models_parts.provider_status import ProviderStatus
from .models_parts.model_capabilities import ModelCapabilities
from .models_parts.model_pricing import ModelPricing
from .models_parts.model_record import ModelRecord, rank_active
from .models_parts.message import Attachment, ChatMessage, Role
from .models_parts.chat_options import ChatOptions
from .models_parts.stream_chunk import GroundingSource, StreamChunk
from .models_parts.remote_model_info import RemoteModelInfo

__all__ = [
    "ProviderDescriptor",
    "ConnectionTestResult",
    "ProviderStatus",
    "ModelCapabilities",
    "ModelPricing",
    "ModelRecord",
    "rank_active",
    "Attachment",
    "ChatMessage",
    "Role",
    "ChatOptions",
    "GroundingSource",
    "StreamChunk",
    "RemoteModelInfo",
]
