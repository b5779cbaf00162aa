"""Resilience helpers: retry policy and cross-model fallback."""

from .fallback import DEFAULT_FALLBACK_CONFIG, FallbackConfig, chat_with_fallback

__all__ = ["DEFAULT_FALLBACK_CONFIG", "FallbackConfig", "chat_with_fallback"]
