"""hub_providers.config.env
========================

Environment variable mapping for provider credentials and the ``HUB_*``
settings.

Purpose
-------
- Single source of truth for provider -> API key env var names (canonical
  first, aliases after).
- Small parsing helpers shared by :func:`hub_providers.config.get_settings`.

Helpers never raise on unknown providers or unset variables; they return
``None`` and let callers decide.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Provider -> ordered env var names (canonical first)
ENV_KEYS: Dict[str, Tuple[str, ...]] = {
    "openrouter": ("OPENROUTER_API_KEY",),
    "google": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "deepseek": ("DEEPSEEK_API_KEY",),
    "groq": ("GROQ_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
    "xai": ("XAI_API_KEY",),
    "nvidia": ("NVIDIA_API_KEY",),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the value looks like a placeholder or test token."""
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("test_")


def get_env_var_candidates(provider: str) -> Iterable[str]:
    return ENV_KEYS.get(provider.lower(), ()) if provider else ()


def resolve_provider_key_env(provider: str) -> Optional[str]:
    """Return the first non-placeholder API key found in the environment."""
    for name in get_env_var_candidates(provider):
        val = os.getenv(name)
        if val and not is_placeholder(val):
            return val
    return None


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


__all__ = [
    "ENV_KEYS",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key_env",
    "env_bool",
    "env_int",
]
