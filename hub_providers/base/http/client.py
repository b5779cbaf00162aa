"""Async HTTP client construction for providers.

Purpose:
    Build ``httpx.AsyncClient`` instances with timeouts taken exclusively from
    :func:`get_timeout_config`. Adapters own the client they receive for
    their whole lifetime; tests inject an ``httpx.MockTransport``.

Lifecycle:
    Clients are created lazily by adapters and closed through
    ``ModelManager.aclose`` (which delegates to each adapter's ``aclose``).
"""

from __future__ import annotations

from typing import Mapping, Optional

import httpx

from ..timeouts import get_timeout_config


def build_async_client(
    base_url: Optional[str] = None,
    *,
    headers: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return a new ``httpx.AsyncClient`` configured for provider traffic.

    Parameters:
        base_url: Optional API base URL so callers can issue relative requests.
        headers: Default headers sent on every request (identity headers).
        transport: Optional transport override, used by tests.
    """
    kwargs = {
        "timeout": get_timeout_config().as_httpx(),
        "headers": dict(headers or {}),
    }
    if base_url:
        kwargs["base_url"] = base_url
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


__all__ = ["build_async_client"]
