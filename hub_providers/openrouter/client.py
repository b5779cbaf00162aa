"""OpenRouter provider adapter (OpenAI-style over HTTP).

Summary:
- Chat streaming is inherited from the OpenAI-compatible adapter.
- Every request carries the ``HTTP-Referer`` and ``X-Title`` identity headers
  OpenRouter asks applications to send.
- Connection test lists the catalog instead of spending a completion.
- Model listing returns context length and per-million-token pricing, and
  raises ``ProviderError`` on failure (discovery UIs surface it).
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from ..base.errors import ErrorCode, ProviderError, classify_exception, wrap_exception
from ..base.logging import LogContext, normalized_log_event
from ..base.models import ConnectionTestResult, ModelPricing, RemoteModelInfo
from ..config.defaults import OPENROUTER_APP_REFERER, OPENROUTER_APP_TITLE, provider_descriptor
from ..openai_compat.client import OpenAICompatibleProvider, error_message_from_body

PER_MILLION = 1_000_000


def _per_million(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value) * PER_MILLION
    except (TypeError, ValueError):
        return None


def parse_model_entry(entry: Dict[str, Any]) -> RemoteModelInfo:
    pricing = entry.get("pricing") or {}
    return RemoteModelInfo(
        id=entry["id"],
        name=entry.get("name") or entry["id"],
        context_length=entry.get("context_length"),
        pricing=ModelPricing(
            input_per_million=_per_million(pricing.get("prompt")),
            output_per_million=_per_million(pricing.get("completion")),
            currency="USD",
        ),
    )


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter aggregator adapter.

    Parameters:
        app_title: Value of the ``X-Title`` header.
        app_referer: Value of the ``HTTP-Referer`` header.
        base_url: Optional base URL override.
        client: Optional pre-built ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        *,
        app_title: str = OPENROUTER_APP_TITLE,
        app_referer: str = OPENROUTER_APP_REFERER,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        descriptor = provider_descriptor("openrouter")
        super().__init__(descriptor, client=client)
        if base_url:
            self.base_url = base_url.rstrip("/")
        self.app_title = app_title
        self.app_referer = app_referer

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            **super()._headers(api_key),
            "HTTP-Referer": self.app_referer,
            "X-Title": self.app_title,
        }

    async def test_connection(self, api_key: str) -> ConnectionTestResult:
        """GET ``/models`` and report the catalog size; never raises."""
        ctx = LogContext(provider=self.name, operation="test_connection")
        t0 = time.perf_counter()
        try:
            response = await self._http().get(f"{self.base_url}/models", headers=self._headers(api_key))
            latency = round((time.perf_counter() - t0) * 1000)
            if not response.is_success:
                return ConnectionTestResult.failure(error_message_from_body(response), latency)
            count = len(response.json().get("data") or [])
        except Exception as exc:  # noqa: BLE001 - connection tests report every failure
            latency = round((time.perf_counter() - t0) * 1000)
            normalized_log_event(
                self._logger, "test.error", ctx, phase="finalize", error_code=classify_exception(exc).value
            )
            return ConnectionTestResult.failure(str(exc) or "Connection error", latency)
        return ConnectionTestResult(success=True, latency_ms=latency, detail=f"{count} models available")

    async def list_available_models(self, api_key: str) -> List[RemoteModelInfo]:
        """Catalog with pricing and context length.

        Raises:
            ProviderError: non-2xx response, transport failure or malformed body.
        """
        try:
            response = await self._http().get(f"{self.base_url}/models", headers=self._headers(api_key))
        except httpx.HTTPError as exc:
            raise wrap_exception(exc, provider=self.name, prefix="Failed to list OpenRouter models: ") from exc
        if not response.is_success:
            raise self._http_error(response, None)
        try:
            data = response.json().get("data") or []
            return [parse_model_entry(m) for m in data]
        except (ValueError, AttributeError, KeyError, TypeError) as exc:
            raise ProviderError(
                code=ErrorCode.DECODE,
                message="Failed to list OpenRouter models: malformed catalog",
                provider=self.name,
                raw=exc,
            ) from exc


__all__ = ["OpenRouterProvider", "parse_model_entry"]
