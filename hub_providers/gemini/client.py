"""GeminiProvider adapter.

Uses the ``google-genai`` SDK async surface (``client.aio.models``) for
streaming chat, connection tests and model discovery. One SDK client is kept
per API key and closed by ``aclose``; connection tests use a throwaway client.

Wire mapping
- Role ``assistant`` -> ``model``; system messages are folded into the
  system instruction.
- Image attachments become ``inline_data`` parts; other attachments become a
  text part ``[File: <name>]`` followed by the payload.
- ``options.web_search`` enables the ``google_search`` grounding tool; web
  citations are read from the first candidate's grounding metadata.
- Parts flagged ``thought`` feed the reasoning channel.
"""

from __future__ import annotations

import base64
import binascii
import time
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, List, Optional

from google import genai

from ..base.cancellation import CancelledError
from ..base.errors import ProviderError, classify_exception, wrap_exception
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import (
    ChatMessage,
    ChatOptions,
    ConnectionTestResult,
    GroundingSource,
    ModelRecord,
    RemoteModelInfo,
    StreamChunk,
)
from ..config.defaults import (
    CONNECTION_TEST_MAX_TOKENS,
    CONNECTION_TEST_PROMPT,
    DEFAULT_SYSTEM_INSTRUCTION,
    GEMINI_TEST_MODEL,
    provider_descriptor,
)

_DESCRIPTOR = provider_descriptor("google")


def _attachment_part(att) -> Dict[str, Any]:
    if att.is_image:
        try:
            data = base64.b64decode(att.data)
        except (binascii.Error, ValueError):
            data = att.data.encode("utf-8")
        return {"inline_data": {"mime_type": att.mime_type, "data": data}}
    return {"text": f"[File: {att.file_name}]\n{att.data}"}


def build_contents(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    """Translate unified messages into Gemini ``contents`` (system messages excluded)."""
    contents: List[Dict[str, Any]] = []
    for m in messages:
        if m.role == "system":
            continue
        parts: List[Dict[str, Any]] = [{"text": m.content}] if m.content else []
        parts.extend(_attachment_part(a) for a in m.attachments)
        contents.append({"role": "model" if m.role == "assistant" else "user", "parts": parts})
    return contents


def build_config(messages: List[ChatMessage], options: ChatOptions) -> Dict[str, Any]:
    """Generation config dict; ``None`` values are omitted."""
    system_parts = [m.content for m in messages if m.role == "system" and m.content]
    if options.system_instruction:
        system_parts.insert(0, options.system_instruction)
    config: Dict[str, Any] = {
        "system_instruction": "\n\n".join(system_parts) or DEFAULT_SYSTEM_INSTRUCTION,
        "max_output_tokens": options.max_tokens,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "stop_sequences": list(options.stop_sequences) or None,
    }
    if options.web_search:
        config["tools"] = [{"google_search": {}}]
    return {k: v for k, v in config.items() if v is not None}


def _first_candidate(chunk: Any) -> Any:
    candidates = getattr(chunk, "candidates", None) or []
    return candidates[0] if candidates else None


def extract_sources(chunk: Any) -> List[GroundingSource]:
    """Web citations from ``candidates[0].grounding_metadata.grounding_chunks``."""
    candidate = _first_candidate(chunk)
    metadata = getattr(candidate, "grounding_metadata", None)
    out: List[GroundingSource] = []
    for gc in getattr(metadata, "grounding_chunks", None) or []:
        web = getattr(gc, "web", None)
        if web is not None and getattr(web, "uri", None):
            out.append(GroundingSource(title=getattr(web, "title", None) or web.uri, uri=web.uri))
    return out


def extract_text(chunk: Any) -> tuple[str, str]:
    """Return ``(answer_delta, reasoning_delta)`` for one streamed response."""
    candidate = _first_candidate(chunk)
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None)
    if not parts:
        return getattr(chunk, "text", None) or "", ""
    text, reasoning = [], []
    for part in parts:
        value = getattr(part, "text", None)
        if not value:
            continue
        (reasoning if getattr(part, "thought", False) else text).append(value)
    return "".join(text), "".join(reasoning)


class GeminiProvider:
    """Native Gemini adapter implementing ``ProviderStrategy`` and model listing."""

    name = "google"

    def __init__(self, *, base_url: Optional[str] = None) -> None:
        self.display_name = _DESCRIPTOR.display_name
        self.base_url = base_url or _DESCRIPTOR.base_url
        self._clients: Dict[str, Any] = {}
        self._logger = get_logger("providers.gemini")

    def _client(self, api_key: str):
        """SDK client for ``api_key``, created once and reused until :meth:`aclose`."""
        client = self._clients.get(api_key)
        if client is None:
            client = self._clients[api_key] = genai.Client(api_key=api_key)
        return client

    async def test_connection(self, api_key: str) -> ConnectionTestResult:
        """One tiny completion on the lite model; never raises."""
        ctx = LogContext(provider=self.name, model=GEMINI_TEST_MODEL, operation="test_connection")
        client = None
        t0 = time.perf_counter()
        try:
            client = genai.Client(api_key=api_key)
            response = await client.aio.models.generate_content(
                model=GEMINI_TEST_MODEL,
                contents=[{"role": "user", "parts": [{"text": CONNECTION_TEST_PROMPT}]}],
                config={"max_output_tokens": CONNECTION_TEST_MAX_TOKENS},
            )
            latency = round((time.perf_counter() - t0) * 1000)
        except Exception as exc:  # noqa: BLE001 - connection tests report every failure
            latency = round((time.perf_counter() - t0) * 1000)
            normalized_log_event(
                self._logger, "test.error", ctx, phase="finalize", error_code=classify_exception(exc).value
            )
            return ConnectionTestResult.failure(str(exc) or "Connection error", latency)
        finally:
            if client is not None:
                await client.aio.aclose()
        if getattr(response, "text", None):
            return ConnectionTestResult(success=True, latency_ms=latency, detail="Connection to Gemini established")
        return ConnectionTestResult.failure("Empty response from server", latency)

    async def chat(
        self,
        model: ModelRecord,
        messages: List[ChatMessage],
        api_key: str,
        options: Optional[ChatOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream cumulative chunks; SDK failures raise ``ProviderError``."""
        options = options or ChatOptions()
        ctx = LogContext(provider=self.name, model=model.model_id, operation="chat")
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", web_search=options.web_search)
        text, reasoning = "", ""
        sources: List[GroundingSource] = []
        try:
            stream = await self._client(api_key).aio.models.generate_content_stream(
                model=model.model_id,
                contents=build_contents(messages),
                config=build_config(messages, options),
            )
            async with aclosing(stream) as frames:
                async for frame in frames:
                    options.raise_if_cancelled()
                    text_delta, reasoning_delta = extract_text(frame)
                    text += text_delta
                    reasoning += reasoning_delta
                    frame_sources = extract_sources(frame)
                    if frame_sources:
                        sources = frame_sources
                    if text_delta or reasoning_delta or frame_sources:
                        yield StreamChunk(text=text, reasoning=reasoning or None, sources=sources or None)
        except (CancelledError, ProviderError):
            raise
        except Exception as exc:  # noqa: BLE001 - normalized into ProviderError
            err = wrap_exception(exc, provider=self.name, model=model.model_id, prefix="Gemini: ")
            normalized_log_event(self._logger, "stream.error", ctx, phase="finalize", error_code=err.code.value)
            raise err from exc
        normalized_log_event(self._logger, "stream.end", ctx, phase="finalize", chars=len(text))
        yield StreamChunk(text=text, reasoning=reasoning or None, sources=sources or None, is_complete=True)

    async def list_available_models(self, api_key: str) -> List[RemoteModelInfo]:
        """Models that support ``generateContent``; failures return ``[]``."""
        out: List[RemoteModelInfo] = []
        try:
            pager = await self._client(api_key).aio.models.list()
            async for m in pager:
                actions = getattr(m, "supported_actions", None) or []
                if actions and "generateContent" not in actions:
                    continue
                model_id = (getattr(m, "name", "") or "").removeprefix("models/")
                if model_id:
                    out.append(
                        RemoteModelInfo(
                            id=model_id,
                            name=getattr(m, "display_name", None) or model_id,
                            context_length=getattr(m, "input_token_limit", None),
                        )
                    )
        except Exception as exc:  # noqa: BLE001 - discovery is best effort
            normalized_log_event(
                self._logger,
                "models.error",
                LogContext(provider=self.name, operation="list_models"),
                phase="finalize",
                error_code=classify_exception(exc).value,
            )
            return []
        return out

    async def aclose(self) -> None:
        """Close every cached SDK client and its HTTP connections."""
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            await client.aio.aclose()


__all__ = ["GeminiProvider", "build_contents", "build_config", "extract_sources", "extract_text"]
