"""OpenAI-compatible streaming chat adapter.

One implementation serves every backend speaking the ``/chat/completions``
wire format (OpenAI, DeepSeek, Groq, Mistral, xAI, NVIDIA NIM). It is
parametrized by descriptor (name, display name, base URL, test model), the
auth header name and an optional ``extra_body_for(model)`` hook.

Streaming
- ``data: {json}`` SSE frames are decoded through
  :class:`~hub_providers.base.streaming.SSELineBuffer`, so a frame split
  across two network reads decodes the same as one delivered whole.
- ``delta.content`` and ``delta.reasoning_content`` accumulate into the
  cumulative ``text`` / ``reasoning`` channels; one chunk is yielded per
  content-bearing frame and a final ``is_complete`` chunk closes the stream.
- Closing the generator early (``aclose``) exits the ``httpx`` stream
  context, which releases the in-flight response.
"""

from __future__ import annotations

import time
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional

import httpx

from ..base.cancellation import CancelledError
from ..base.errors import ProviderError, classify_exception, code_for_status, wrap_exception
from ..base.http import build_async_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import (
    ChatMessage,
    ChatOptions,
    ConnectionTestResult,
    ModelRecord,
    ProviderDescriptor,
    RemoteModelInfo,
    StreamChunk,
)
from ..base.streaming import decode_openai_frame, iter_sse_lines
from ..config.defaults import CONNECTION_TEST_MAX_TOKENS, CONNECTION_TEST_PROMPT

ExtraBodyHook = Callable[[ModelRecord], Mapping[str, Any]]


def error_message_from_body(response: httpx.Response) -> str:
    """Provider ``error.message`` from a JSON error body, else ``HTTP <status>``."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return f"HTTP {response.status_code}"


def _message_content(m: ChatMessage) -> Any:
    if not m.attachments:
        return m.content
    parts: List[Dict[str, Any]] = [{"type": "text", "text": m.content}] if m.content else []
    for att in m.attachments:
        if att.is_image:
            url = f"data:{att.mime_type};base64,{att.data}"
            parts.append({"type": "image_url", "image_url": {"url": url}})
        else:
            parts.append({"type": "text", "text": f"[File: {att.file_name}]\n{att.data}"})
    return parts


def build_messages(messages: List[ChatMessage], options: ChatOptions) -> List[Dict[str, Any]]:
    """Unified messages to OpenAI ``messages`` (system instruction first)."""
    out: List[Dict[str, Any]] = []
    if options.system_instruction:
        out.append({"role": "system", "content": options.system_instruction})
    out.extend({"role": m.role, "content": _message_content(m)} for m in messages)
    return out


class OpenAICompatibleProvider:
    """Generic ``/chat/completions`` adapter.

    Parameters
    ----------
    descriptor:
        Provider identity and base URL.
    auth_header:
        Header carrying ``Bearer <key>``.
    extra_body_for:
        Optional hook returning provider-specific body fields for a model;
        explicit request fields win over hook values.
    client:
        Optional pre-built ``httpx.AsyncClient`` (tests inject one backed by
        ``httpx.MockTransport``).
    """

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        *,
        auth_header: str = "Authorization",
        extra_body_for: Optional[ExtraBodyHook] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.name = descriptor.name
        self.display_name = descriptor.display_name
        self.base_url = descriptor.base_url.rstrip("/")
        self.test_model = descriptor.test_model or "gpt-4o-mini"
        self.auth_header = auth_header
        self._extra_body_for = extra_body_for
        self._client = client
        self._logger = get_logger(f"providers.{self.name}")

    # ---- http plumbing ----
    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_async_client()
        return self._client

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {self.auth_header: f"Bearer {api_key}", "Content-Type": "application/json"}

    def _http_error(self, response: httpx.Response, model: Optional[str]) -> ProviderError:
        return ProviderError(
            code=code_for_status(response.status_code),
            message=error_message_from_body(response),
            provider=self.name,
            model=model,
            status=response.status_code,
        )

    def build_body(self, model: ModelRecord, messages: List[ChatMessage], options: ChatOptions) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": model.model_id,
            "messages": build_messages(messages, options),
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "top_p": options.top_p,
            "stop": list(options.stop_sequences) or None,
            "stream": True,
        }
        body = {k: v for k, v in body.items() if v is not None}
        if self._extra_body_for is not None:
            body = {**dict(self._extra_body_for(model)), **body}
        return body

    # ---- ProviderStrategy ----
    async def test_connection(self, api_key: str) -> ConnectionTestResult:
        """One short completion against ``test_model``; never raises."""
        ctx = LogContext(provider=self.name, model=self.test_model, operation="test_connection")
        body = {
            "model": self.test_model,
            "messages": [{"role": "user", "content": CONNECTION_TEST_PROMPT}],
            "max_tokens": CONNECTION_TEST_MAX_TOKENS,
        }
        t0 = time.perf_counter()
        try:
            response = await self._http().post(
                f"{self.base_url}/chat/completions", json=body, headers=self._headers(api_key)
            )
        except Exception as exc:  # noqa: BLE001 - connection tests report every failure
            latency = round((time.perf_counter() - t0) * 1000)
            normalized_log_event(
                self._logger, "test.error", ctx, phase="finalize", error_code=classify_exception(exc).value
            )
            return ConnectionTestResult.failure(str(exc) or "Connection error", latency)
        latency = round((time.perf_counter() - t0) * 1000)
        if response.is_success:
            return ConnectionTestResult(success=True, latency_ms=latency, detail=f"Connected to {self.display_name}")
        return ConnectionTestResult.failure(error_message_from_body(response), latency)

    async def chat(
        self,
        model: ModelRecord,
        messages: List[ChatMessage],
        api_key: str,
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream cumulative chunks decoded from the SSE body.

        Raises:
            ProviderError: non-2xx response, transport failure or an
                in-stream ``error`` frame.
            CancelledError: the options' cancellation token fired after a
                content-bearing frame.
        """
        options = options or ChatOptions()
        ctx = LogContext(provider=self.name, model=model.model_id, operation="chat")
        body = self.build_body(model, messages, options)
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", messages=len(body["messages"]))
        text, reasoning, frames = "", "", 0
        try:
            async with self._http().stream(
                "POST",
                f"{self.base_url}/chat/completions",
                json=body,
                headers={**self._headers(api_key), "Accept": "text/event-stream"},
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise self._http_error(response, model.model_id)
                async for line in iter_sse_lines(response):
                    delta = decode_openai_frame(line, provider=self.name, model=model.model_id)
                    if delta is None or delta.is_empty:
                        continue
                    options.raise_if_cancelled()
                    frames += 1
                    text += delta.content
                    reasoning += delta.reasoning
                    yield StreamChunk(text=text, reasoning=reasoning or None)
        except (CancelledError, ProviderError):
            raise
        except httpx.HTTPError as exc:
            err = wrap_exception(exc, provider=self.name, model=model.model_id, prefix=f"{self.display_name}: ")
            normalized_log_event(self._logger, "stream.error", ctx, phase="finalize", error_code=err.code.value)
            raise err from exc
        normalized_log_event(self._logger, "stream.end", ctx, phase="finalize", frames=frames, chars=len(text))
        yield StreamChunk(text=text, reasoning=reasoning or None, is_complete=True)

    async def list_available_models(self, api_key: str) -> List[RemoteModelInfo]:
        """GET ``/models``; any failure yields ``[]``."""
        try:
            response = await self._http().get(f"{self.base_url}/models", headers=self._headers(api_key))
            if not response.is_success:
                return []
            data = response.json().get("data") or []
        except (httpx.HTTPError, ValueError, AttributeError):
            return []
        return [RemoteModelInfo(id=m["id"], name=m["id"]) for m in data if isinstance(m, dict) and m.get("id")]

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["OpenAICompatibleProvider", "build_messages", "error_message_from_body"]
