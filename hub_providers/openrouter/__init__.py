"""OpenRouter aggregator adapter."""

from .client import OpenRouterProvider

__all__ = ["OpenRouterProvider"]
