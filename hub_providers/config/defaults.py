"""hub_providers.config.defaults
=============================

Central place for small, stable default values used across the package: the
built-in provider descriptors, the seed model catalog, storage keys and
infrastructure constants. Values can be overridden through
:func:`hub_providers.config.get_settings`.

This module imports nothing from other provider packages apart from the data
model, so it can be imported from anywhere without cycles.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from ..base.models import ProviderDescriptor

# ---- Storage keys (one JSON blob per slot) ----
STORAGE_KEY_MODELS = "ai_models_config"
STORAGE_KEY_ACTIVE_MODEL = "ai_active_model"
STORAGE_KEY_API_KEYS = "ai_api_keys_encrypted"
STORAGE_KEY_PROVIDER_STATUS = "ai_provider_status"
STORAGE_KEY_DEVICE_ID = "ai_device_id"
STORAGE_KEY_FALLBACK_CONFIG = "ai_fallback_config"


# ---- Credential encryption ----
# Salt mixed into the key derivation; changing it invalidates stored keys.
CREDENTIAL_SALT = "hub-providers-salt-v1"
# Origin used when the process is not served from a web origin.
DEFAULT_ORIGIN = "http://localhost"
# Display placeholder for masked keys.
MASK_PLACEHOLDER = "••••••••"
MASK_MIN_LENGTH = 12


# ---- Fallback policy ----
FALLBACK_DEFAULT_MAX_RETRIES = 2
FALLBACK_DEFAULT_RETRY_DELAY_MS = 1000
FALLBACK_DEFAULT_ENABLE = True


# ---- Adapter defaults ----
DEFAULT_SYSTEM_INSTRUCTION = "You are a helpful assistant."
GEMINI_TEST_MODEL = "gemini-2.0-flash-lite"
CONNECTION_TEST_MAX_TOKENS = 5
CONNECTION_TEST_PROMPT = "Hi"
OPENROUTER_APP_TITLE = "Hub Providers"
OPENROUTER_APP_REFERER = "http://localhost"
SYSTEM_DEFAULT_PROVIDER = "openrouter"


# ---- SQLite config (infrastructure) ----
SQLITE_BUSY_TIMEOUT_MS = 5000
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_SYNCHRONOUS = "NORMAL"


# ---- Built-in providers ----
DEFAULT_PROVIDERS: Tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor("openrouter", "OpenRouter (Aggregator)", "https://openrouter.ai/api/v1"),
    ProviderDescriptor("google", "Google Gemini", "https://generativelanguage.googleapis.com", GEMINI_TEST_MODEL),
    ProviderDescriptor("openai", "OpenAI", "https://api.openai.com/v1", "gpt-4o-mini"),
    ProviderDescriptor("anthropic", "Anthropic (Claude)", "https://api.anthropic.com/v1"),
    ProviderDescriptor("deepseek", "DeepSeek", "https://api.deepseek.com", "deepseek-chat"),
    ProviderDescriptor("groq", "Groq Cloud", "https://api.groq.com/openai/v1", "llama-3.3-70b-versatile"),
    ProviderDescriptor("mistral", "Mistral AI", "https://api.mistral.ai/v1", "mistral-small-latest"),
    ProviderDescriptor("xai", "xAI (Grok)", "https://api.x.ai/v1", "grok-3"),
    ProviderDescriptor("nvidia", "NVIDIA NIM", "https://integrate.api.nvidia.com/v1", "moonshotai/kimi-k2.5"),
)


def provider_descriptor(name: str) -> ProviderDescriptor | None:
    """Return the built-in descriptor for ``name`` or ``None``."""
    return next((p for p in DEFAULT_PROVIDERS if p.name == name), None)


# ---- Seed model catalog (storage form without id/timestamps) ----
_FREE = {"input_per_million": 0, "output_per_million": 0, "currency": "USD"}

DEFAULT_MODELS: List[Dict[str, Any]] = [
    {
        "provider_name": "openrouter",
        "model_id": "google/gemini-2.0-flash-lite-preview-02-05:free",
        "display_name": "Gemini 2.0 Flash Lite (Free)",
        "description": "System default model via OpenRouter",
        "is_default": True,
        "priority": 1,
        "capabilities": {"supports_vision": True, "supports_streaming": True, "context_window": 128000},
        "pricing": _FREE,
    },
    {
        "provider_name": "google",
        "model_id": "gemini-3-pro-preview",
        "display_name": "Gemini 3 Pro",
        "description": "Google's most capable model",
        "priority": 2,
        "capabilities": {
            "supports_vision": True,
            "supports_tools": True,
            "supports_streaming": True,
            "supports_reasoning": True,
            "context_window": 2000000,
        },
    },
    {
        "provider_name": "google",
        "model_id": "gemini-3-flash-preview",
        "display_name": "Gemini 3 Flash",
        "description": "Fast next-generation model",
        "priority": 5,
        "capabilities": {
            "supports_vision": True,
            "supports_tools": True,
            "supports_streaming": True,
            "context_window": 1000000,
        },
    },
    {
        "provider_name": "openrouter",
        "model_id": "deepseek/deepseek-r1:free",
        "display_name": "DeepSeek R1 (Free)",
        "description": "Free advanced reasoning",
        "priority": 11,
        "capabilities": {"supports_streaming": True, "supports_reasoning": True, "context_window": 64000},
        "pricing": _FREE,
    },
    {
        "provider_name": "openrouter",
        "model_id": "meta-llama/llama-3.3-70b-instruct:free",
        "display_name": "Llama 3.3 70B (Free)",
        "description": "Meta open-weights model",
        "priority": 12,
        "capabilities": {"supports_streaming": True, "context_window": 128000},
        "pricing": _FREE,
    },
    {
        "provider_name": "openai",
        "model_id": "gpt-4o",
        "display_name": "GPT-4o",
        "description": "OpenAI multimodal model",
        "priority": 20,
        "capabilities": {
            "supports_vision": True,
            "supports_tools": True,
            "supports_streaming": True,
            "context_window": 128000,
        },
        "pricing": {"input_per_million": 2.5, "output_per_million": 10, "currency": "USD"},
    },
    {
        "provider_name": "openai",
        "model_id": "gpt-4o-mini",
        "display_name": "GPT-4o Mini",
        "description": "Efficient, low-cost variant",
        "priority": 21,
        "capabilities": {"supports_vision": True, "supports_streaming": True, "context_window": 128000},
        "pricing": {"input_per_million": 0.15, "output_per_million": 0.6, "currency": "USD"},
    },
    {
        "provider_name": "anthropic",
        "model_id": "claude-sonnet-4-20250514",
        "display_name": "Claude Sonnet 4",
        "description": "Balanced Anthropic model",
        "priority": 30,
        "capabilities": {
            "supports_vision": True,
            "supports_tools": True,
            "supports_streaming": True,
            "context_window": 200000,
        },
        "pricing": {"input_per_million": 3, "output_per_million": 15, "currency": "USD"},
    },
    {
        "provider_name": "deepseek",
        "model_id": "deepseek-chat",
        "display_name": "DeepSeek Chat",
        "description": "DeepSeek chat-optimized model",
        "priority": 40,
        "capabilities": {"supports_streaming": True, "context_window": 64000},
        "pricing": {"input_per_million": 0.14, "output_per_million": 0.28, "currency": "USD"},
    },
    {
        "provider_name": "groq",
        "model_id": "llama-3.3-70b-versatile",
        "display_name": "Llama 3.3 70B (Groq)",
        "description": "Low-latency inference via Groq",
        "priority": 50,
        "capabilities": {"supports_streaming": True, "context_window": 128000},
    },
    {
        "provider_name": "xai",
        "model_id": "grok-3",
        "display_name": "Grok 3",
        "description": "Advanced xAI model",
        "priority": 60,
        "capabilities": {"supports_vision": True, "supports_streaming": True, "context_window": 131072},
        "pricing": {"input_per_million": 3, "output_per_million": 15, "currency": "USD"},
    },
]


__all__ = [
    "STORAGE_KEY_MODELS",
    "STORAGE_KEY_ACTIVE_MODEL",
    "STORAGE_KEY_API_KEYS",
    "STORAGE_KEY_PROVIDER_STATUS",
    "STORAGE_KEY_DEVICE_ID",
    "STORAGE_KEY_FALLBACK_CONFIG",
    "CREDENTIAL_SALT",
    "DEFAULT_ORIGIN",
    "MASK_PLACEHOLDER",
    "MASK_MIN_LENGTH",
    "FALLBACK_DEFAULT_MAX_RETRIES",
    "FALLBACK_DEFAULT_RETRY_DELAY_MS",
    "FALLBACK_DEFAULT_ENABLE",
    "DEFAULT_SYSTEM_INSTRUCTION",
    "GEMINI_TEST_MODEL",
    "CONNECTION_TEST_MAX_TOKENS",
    "CONNECTION_TEST_PROMPT",
    "OPENROUTER_APP_TITLE",
    "OPENROUTER_APP_REFERER",
    "SYSTEM_DEFAULT_PROVIDER",
    "SQLITE_BUSY_TIMEOUT_MS",
    "SQLITE_JOURNAL_MODE",
    "SQLITE_SYNCHRONOUS",
    "DEFAULT_PROVIDERS",
    "DEFAULT_MODELS",
    "provider_descriptor",
]
