"""Streaming package: SSE decoding shared by the OpenAI-compatible adapters."""

from .sse import DONE_SENTINEL, OpenAIDelta, SSELineBuffer, decode_openai_frame, iter_sse_lines

__all__ = [
    "DONE_SENTINEL",
    "OpenAIDelta",
    "SSELineBuffer",
    "decode_openai_frame",
    "iter_sse_lines",
]
