"""Server-Sent-Events decoding for OpenAI-style chat streams.

Purpose:
- Turn raw network reads into complete ``data:`` lines even when a read ends
  in the middle of a JSON object or of a multi-byte UTF-8 sequence.
- Translate one line into a content/reasoning delta.

Notes:
- ``decode_openai_frame`` never raises on malformed JSON or the ``[DONE]``
  sentinel; those frames are dropped. An explicit ``{"error": ...}`` frame is
  the only frame that raises, so a provider error never looks like a clean
  truncated answer.
"""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional

import httpx

from ..errors import ErrorCode, ProviderError

DONE_SENTINEL = "[DONE]"


class SSELineBuffer:
    """Incremental splitter from byte chunks to complete text lines.

    The trailing partial line is kept until the next ``feed`` (or ``flush``).
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._tail = ""

    def feed(self, data: bytes) -> List[str]:
        """Consume one network read and return the lines it completed."""
        self._tail += self._decoder.decode(data)
        *lines, self._tail = self._tail.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> List[str]:
        """Return whatever is left once the body is exhausted."""
        self._tail += self._decoder.decode(b"", final=True)
        rest, self._tail = self._tail.rstrip("\r"), ""
        return [rest] if rest else []


@dataclass(frozen=True)
class OpenAIDelta:
    """Incremental text carried by one ``chat.completion.chunk`` frame."""

    content: str = ""
    reasoning: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.reasoning


def _frame_error_message(error: object) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or "Provider stream error")
    return str(error)


def _text(value: object) -> str:
    """String content, or the joined ``text`` of a list of content parts."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "".join(p["text"] for p in value if isinstance(p, dict) and isinstance(p.get("text"), str))
    return ""


def decode_openai_frame(line: str, *, provider: str, model: Optional[str] = None) -> Optional[OpenAIDelta]:
    """Decode one SSE line into an :class:`OpenAIDelta`.

    Returns ``None`` for blank lines, comments, non-``data`` fields, the
    ``[DONE]`` sentinel, malformed JSON and frames without a
    ``choices[0].delta`` object.

    Raises:
        ProviderError: when the frame carries an ``error`` object.
    """
    if not line or not line.startswith("data:"):
        return None
    payload = line[5:].strip()
    if not payload or payload == DONE_SENTINEL:
        return None
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    if data.get("error"):
        raise ProviderError(
            code=ErrorCode.SERVER_ERROR,
            message=_frame_error_message(data["error"]),
            provider=provider,
            model=model,
        )
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    return OpenAIDelta(
        content=_text(delta.get("content")),
        reasoning=_text(delta.get("reasoning_content")) or _text(delta.get("reasoning")),
    )


async def iter_sse_lines(response: httpx.Response) -> AsyncIterator[str]:
    """Yield complete lines from a streaming ``httpx`` response body."""
    buffer = SSELineBuffer()
    async for data in response.aiter_bytes():
        for line in buffer.feed(data):
            yield line
    for line in buffer.flush():
        yield line


__all__ = [
    "DONE_SENTINEL",
    "SSELineBuffer",
    "OpenAIDelta",
    "decode_openai_frame",
    "iter_sse_lines",
]
