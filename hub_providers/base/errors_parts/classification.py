"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, httpx transport
error handling and message-based heuristics for SDK exceptions that carry no
status.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from a provider exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.code`` (google-genai ``APIError``)
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status", "code"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


_MESSAGE_PATTERNS = (
    (ErrorCode.RATE_LIMIT, ("rate limit", "quota", "429")),
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH, ("api key", "unauthorized", "forbidden", "permission")),
    (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
    (ErrorCode.UNAVAILABLE, ("unavailable", "overloaded", "503")),
    (ErrorCode.TRANSIENT, ("network", "connection", "502")),
    (ErrorCode.VALIDATION, ("invalid", "malformed")),
)


def code_for_status(status: int) -> ErrorCode:
    """Map an HTTP status to an :class:`ErrorCode`; unmapped 5xx are server errors."""
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    return ErrorCode.SERVER_ERROR if status >= 500 else ErrorCode.UNKNOWN


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:
    for code, patterns in _MESSAGE_PATTERNS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Timeout exceptions (asyncio / httpx).
        3. HTTP status mapping.
        4. Other httpx transport errors are transient.
        5. Substring heuristics on the message.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def is_retryable(exc: Exception) -> bool:
    """Return True for failures that usually succeed on a later attempt."""
    return classify_exception(exc) in (
        ErrorCode.TRANSIENT,
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
        ErrorCode.UNAVAILABLE,
        ErrorCode.SERVER_ERROR,
    )


def wrap_exception(exc: Exception, *, provider: str, model: Optional[str] = None, prefix: str = "") -> ProviderError:
    """Normalize an arbitrary exception into a :class:`ProviderError`.

    ``ProviderError`` instances pass through untouched so the original
    provider message is never double-prefixed.
    """
    if isinstance(exc, ProviderError):
        return exc
    message = str(exc) or exc.__class__.__name__
    return ProviderError(
        code=classify_exception(exc),
        message=f"{prefix}{message}",
        provider=provider,
        model=model,
        status=_extract_status(exc),
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "code_for_status",
    "is_retryable",
    "wrap_exception",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
