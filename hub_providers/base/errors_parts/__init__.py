"""Errors parts package public surface.

Prefer importing from `hub_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, code_for_status, is_retryable, wrap_exception
from .configuration_error import ConfigurationError, ModelRegistryError, NoActiveModelError
from .fallback_error import AllModelsFailedError, ModelFailure

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
