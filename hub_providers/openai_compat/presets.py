"""Pre-configured OpenAI-compatible providers.

Each preset pairs a built-in descriptor from ``config.defaults`` with the
adapter options that backend needs. NVIDIA NIM enables its thinking template
for reasoning-capable models and uses its recommended sampling defaults.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

import httpx

from ..base.models import ModelRecord
from ..config.defaults import provider_descriptor
from .client import ExtraBodyHook, OpenAICompatibleProvider

NVIDIA_DEFAULT_MAX_TOKENS = 16384


def nvidia_extra_body(model: ModelRecord) -> Dict[str, Any]:
    body: Dict[str, Any] = {"max_tokens": NVIDIA_DEFAULT_MAX_TOKENS, "temperature": 1.0, "top_p": 1.0}
    if model.capabilities.supports_reasoning:
        body["chat_template_kwargs"] = {"thinking": True}
    return body


PRESET_HOOKS: Mapping[str, Optional[ExtraBodyHook]] = {
    "openai": None,
    "deepseek": None,
    "groq": None,
    "mistral": None,
    "xai": None,
    "nvidia": nvidia_extra_body,
}


def build_preset(
    name: str,
    *,
    base_url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> OpenAICompatibleProvider:
    """Return the adapter for a built-in OpenAI-compatible provider.

    Raises:
        KeyError: ``name`` is not an OpenAI-compatible preset.
    """
    if name not in PRESET_HOOKS:
        raise KeyError(name)
    descriptor = provider_descriptor(name)
    if base_url:
        descriptor = replace(descriptor, base_url=base_url)
    return OpenAICompatibleProvider(descriptor, extra_body_for=PRESET_HOOKS[name], client=client)


__all__ = ["PRESET_HOOKS", "build_preset", "nvidia_extra_body"]
