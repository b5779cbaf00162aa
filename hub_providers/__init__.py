"""hub_providers package

Provider abstraction and fallback-chat core for a multi-provider LLM client.

Public API (re-exported):
    - Version: ``__version__``
    - Facade: :class:`ModelManager`, :func:`build_container`
    - Orchestrator: :func:`chat_with_fallback`, :class:`FallbackConfig`
    - Data model: :class:`ChatMessage`, :class:`ChatOptions`,
      :class:`StreamChunk`, :class:`ModelRecord`
    - Errors: :class:`ProviderError`, :class:`ErrorCode`,
      :class:`AllModelsFailedError`, :class:`NoActiveModelError`,
      :class:`CancelledError`

Typical use::

    container = build_container()
    manager = container.manager()
    async for chunk in manager.chat([{"role": "user", "content": "Hi"}]):
        print(chunk.text, chunk.model_used)
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import (
    AllModelsFailedError,
    ConfigurationError,
    ErrorCode,
    ModelRegistryError,
    NoActiveModelError,
    ProviderError,
)
from .base.models import Attachment, ChatMessage, ChatOptions, ModelRecord, StreamChunk
from .base.resilience import FallbackConfig, chat_with_fallback
from .di import ProvidersContainer, build_container
from .service import ModelManager

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AllModelsFailedError",
    "Attachment",
    "CancellationToken",
    "CancelledError",
    "ChatMessage",
    "ChatOptions",
    "ConfigurationError",
    "ErrorCode",
    "FallbackConfig",
    "ModelManager",
    "ModelRecord",
    "ModelRegistryError",
    "NoActiveModelError",
    "ProviderError",
    "ProvidersContainer",
    "StreamChunk",
    "build_container",
    "chat_with_fallback",
]
