"""
Repositories package for the providers layer.

Exports:
- CredentialStore: encrypted per-provider API keys
- ModelRegistry: configured models, active selection and provider status
"""

from .credentials import CredentialStore
from .model_registry import ModelRegistry

__all__ = ["CredentialStore", "ModelRegistry"]
