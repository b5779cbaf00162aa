"""
ProviderDescriptor DTO identifying a backend family.

Descriptors are immutable and defined at process start (see
``hub_providers.config.defaults``); they are never persisted. Provider status
is derived at runtime from stored credentials and the model registry.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of one provider backend.

    Attributes:
        name: Unique provider key (e.g. ``"openrouter"``).
        display_name: Human label shown in listings.
        base_url: Base network address of the provider API.
        test_model: Optional fixed model id used by connection tests.
        requires_key: Whether calls need a stored API key.
    """

    name: str
    display_name: str
    base_url: str
    test_model: Optional[str] = None
    requires_key: bool = True


__all__ = ["ProviderDescriptor"]
