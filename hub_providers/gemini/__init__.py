"""Native Gemini adapter."""

from .client import GeminiProvider

__all__ = ["GeminiProvider"]
