"""Unified timeout configuration for provider HTTP traffic.

Centralizes the timeout values used by adapters so no call site carries a
hard-coded literal.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever one of them changes). Supported environment
    variables (all optional, positive floats in seconds):
        HUB_TIMEOUT_CONNECT_SECONDS
        HUB_TIMEOUT_STREAM_SECONDS
        HUB_TIMEOUT_HTTP_SECONDS
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

_ENV_VARS = (
    "HUB_TIMEOUT_CONNECT_SECONDS",
    "HUB_TIMEOUT_STREAM_SECONDS",
    "HUB_TIMEOUT_HTTP_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to establish the connection.
        stream_timeout_seconds: Idle timeout between two reads of a streaming
            body.
        http_timeout_seconds: Baseline timeout for non-streaming calls
            (connection tests, model listing).
    """

    connect_timeout_seconds: float = 10.0
    stream_timeout_seconds: float = 60.0
    http_timeout_seconds: float = 30.0

    def as_httpx(self) -> httpx.Timeout:
        """Build the ``httpx.Timeout`` applied to pooled async clients."""
        return httpx.Timeout(
            self.http_timeout_seconds,
            connect=self.connect_timeout_seconds,
            read=self.stream_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse a positive float from the environment, else ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_VARS)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float("HUB_TIMEOUT_CONNECT_SECONDS", defaults.connect_timeout_seconds),
        stream_timeout_seconds=_parse_env_float("HUB_TIMEOUT_STREAM_SECONDS", defaults.stream_timeout_seconds),
        http_timeout_seconds=_parse_env_float("HUB_TIMEOUT_HTTP_SECONDS", defaults.http_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
