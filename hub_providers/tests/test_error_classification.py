from __future__ import annotations

import asyncio

import httpx

from ..base.errors import (
    AllModelsFailedError,
    ErrorCode,
    ModelFailure,
    ProviderError,
    classify_exception,
    code_for_status,
    is_retryable,
    wrap_exception,
)


class _StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"status {status_code}")
        self.status_code = status_code


def test_status_mapping():
    assert code_for_status(401) is ErrorCode.AUTH  # nosec B101
    assert code_for_status(429) is ErrorCode.RATE_LIMIT  # nosec B101
    assert code_for_status(507) is ErrorCode.SERVER_ERROR  # nosec B101
    assert code_for_status(418) is ErrorCode.UNKNOWN  # nosec B101


def test_classify_precedence():
    req = httpx.Request("GET", "https://x.invalid")
    assert classify_exception(ProviderError(ErrorCode.DECODE, "bad", "p")) is ErrorCode.DECODE  # nosec B101
    assert classify_exception(asyncio.TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow", request=req)) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(_StatusError(429)) is ErrorCode.RATE_LIMIT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused", request=req)) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(RuntimeError("API key not valid")) is ErrorCode.AUTH  # nosec B101
    assert classify_exception(RuntimeError("???")) is ErrorCode.UNKNOWN  # nosec B101


def test_is_retryable():
    assert is_retryable(_StatusError(503)) is True  # nosec B101
    assert is_retryable(_StatusError(401)) is False  # nosec B101


def test_wrap_exception_prefixes_once():
    wrapped = wrap_exception(_StatusError(500), provider="openai", model="gpt", prefix="OpenAI: ")
    assert wrapped.message == "OpenAI: status 500"  # nosec B101
    assert wrapped.status == 500 and wrapped.code is ErrorCode.SERVER_ERROR  # nosec B101
    assert wrap_exception(wrapped, provider="openai", prefix="again: ") is wrapped  # nosec B101


def test_all_models_failed_message():
    err = AllModelsFailedError([ModelFailure("A", "Provider not found"), ModelFailure("B", "HTTP 500")])
    assert str(err) == "All models failed:\n• A: Provider not found\n• B: HTTP 500"  # nosec B101
