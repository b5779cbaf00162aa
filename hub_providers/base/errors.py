"""Unified error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``hub_providers.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, code_for_status, is_retryable, wrap_exception
from .errors_parts.configuration_error import (
    ConfigurationError,
    ModelRegistryError,
    NoActiveModelError,
)
from .errors_parts.fallback_error import AllModelsFailedError, ModelFailure

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "code_for_status",
    "is_retryable",
    "wrap_exception",
    "ConfigurationError",
    "ModelRegistryError",
    "NoActiveModelError",
    "AllModelsFailedError",
    "ModelFailure",
]
