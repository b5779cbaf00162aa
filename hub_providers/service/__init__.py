"""Service layer: the ModelManager facade and the CLI."""

from .model_manager import ModelManager

__all__ = ["ModelManager"]
