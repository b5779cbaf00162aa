"""Test doubles shared across the suite.

``ScriptedStrategy`` replays a fixed script per ``chat`` call: a list of
cumulative texts streams those chunks, an exception fails the attempt, and a
list may end in an exception to fail after producing output.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from ..base.models import ConnectionTestResult, ModelRecord, StreamChunk


class ScriptedStrategy:
    def __init__(self, name: str, script: Sequence[Any], *, display_name: Optional[str] = None) -> None:
        self.name = name
        self.display_name = display_name or name
        self.base_url = f"https://{name}.invalid"
        self.script = list(script)
        self.calls: List[Dict[str, Any]] = []
        self.closed = 0
        self.aclose_calls = 0

    def _step(self) -> Any:
        index = min(len(self.calls) - 1, len(self.script) - 1)
        return self.script[index]

    async def test_connection(self, api_key: str) -> ConnectionTestResult:
        if api_key == "good-key":
            return ConnectionTestResult(success=True, latency_ms=1, detail="ok")
        return ConnectionTestResult.failure("Invalid API key", 1)

    async def chat(self, model: ModelRecord, messages, api_key: str, options=None):
        self.calls.append({"model": model.model_id, "api_key": api_key, "messages": messages})
        step = self._step()
        try:
            if isinstance(step, BaseException):
                raise step
            for piece in step:
                if isinstance(piece, BaseException):
                    raise piece
                yield piece if isinstance(piece, StreamChunk) else StreamChunk(text=piece)
                if options is not None:
                    options.raise_if_cancelled()
        finally:
            self.closed += 1

    async def aclose(self) -> None:
        self.aclose_calls += 1


def make_record(
    record_id: str,
    provider: str,
    priority: int,
    *,
    display_name: Optional[str] = None,
    is_active: bool = True,
    is_default: bool = False,
) -> ModelRecord:
    return ModelRecord(
        id=record_id,
        provider_name=provider,
        model_id=f"{provider}-model",
        display_name=display_name or record_id,
        priority=priority,
        is_active=is_active,
        is_default=is_default,
    )


def sse_frame(content: Optional[str] = None, *, reasoning: Optional[str] = None) -> bytes:
    delta: Dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if reasoning is not None:
        delta["reasoning_content"] = reasoning
    payload = {"choices": [{"delta": delta}]}
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered as the given network reads."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = list(chunks)
        self.closed = False
        self.reads = 0

    async def __aiter__(self):
        for chunk in self._chunks:
            self.reads += 1
            yield chunk

    async def aclose(self) -> None:
        self.closed = True
