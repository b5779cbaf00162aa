"""
Provider interfaces public surface.

Re-exports the protocol definitions under
``hub_providers.base.interfaces_parts``.
"""

from .interfaces_parts.provider_strategy import ProviderStrategy
from .interfaces_parts.model_listing_provider import ModelListingProvider

__all__ = ["ProviderStrategy", "ModelListingProvider"]
