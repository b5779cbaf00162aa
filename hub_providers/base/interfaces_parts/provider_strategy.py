"""ProviderStrategy Protocol (single-class module).

Defines the polymorphic contract every backend family implements. The
fallback orchestrator holds a name -> strategy mapping and never branches on
provider names.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Optional, Protocol, runtime_checkable

from ..models import ChatMessage, ChatOptions, ConnectionTestResult, ModelRecord, StreamChunk


@runtime_checkable
class ProviderStrategy(Protocol):
    """Streaming chat contract for one provider backend."""

    name: str
    display_name: str
    base_url: str

    async def test_connection(self, api_key: str) -> ConnectionTestResult:
        """Issue a minimal low-cost request and report round-trip latency.

        Must not raise: every failure is captured in ``ConnectionTestResult.error``.
        """
        ...

    def chat(
        self,
        model: ModelRecord,
        messages: List[ChatMessage],
        api_key: str,
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream cumulative chunks for one completion.

        The sequence is finite and not restartable; its last chunk has
        ``is_complete=True``. Provider-reported errors raise
        :class:`~hub_providers.base.errors.ProviderError` instead of
        truncating output.
        """
        ...


__all__ = ["ProviderStrategy"]
