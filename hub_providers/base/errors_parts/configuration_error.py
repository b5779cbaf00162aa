"""
Configuration error types.

Configuration errors are detected before any network call (no active model,
unknown provider, missing key, duplicate registry entry). They are fatal for
the invocation that raised them and never corrupt persisted state.
"""
from __future__ import annotations

from .error_code import ErrorCode


class ConfigurationError(Exception):
    """Base class for errors caused by local configuration rather than I/O."""

    code: ErrorCode = ErrorCode.CONFIGURATION

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NoActiveModelError(ConfigurationError):
    """Raised when a chat is requested but no model participates in ranking."""

    def __init__(self, message: str = "No active model configured.") -> None:
        super().__init__(message)


class ModelRegistryError(ConfigurationError):
    """Raised for invalid registry operations (duplicates, unknown ids)."""


__all__ = ["ConfigurationError", "NoActiveModelError", "ModelRegistryError"]
