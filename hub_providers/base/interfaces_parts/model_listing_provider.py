"""ModelListingProvider Protocol (single-class module).

Optional capability: adapters able to query their provider's model catalog.
Absence of this capability is a valid adapter configuration.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from ..models import RemoteModelInfo


@runtime_checkable
class ModelListingProvider(Protocol):
    """Interface for adapters that expose remote model discovery."""

    async def list_available_models(self, api_key: str) -> List[RemoteModelInfo]:
        ...


__all__ = ["ModelListingProvider"]
