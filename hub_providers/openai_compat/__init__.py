"""Generic OpenAI-compatible adapter and its presets."""

from .client import OpenAICompatibleProvider
from .presets import PRESET_HOOKS, build_preset

__all__ = ["OpenAICompatibleProvider", "PRESET_HOOKS", "build_preset"]
