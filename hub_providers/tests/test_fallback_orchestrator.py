"""chat_with_fallback: ranking, retries with linear backoff, failover, cancellation."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import AllModelsFailedError, NoActiveModelError, ProviderError, ErrorCode
from ..base.models import ChatMessage, ChatOptions, StreamChunk
from ..base.resilience import FallbackConfig, chat_with_fallback
from ..base.resilience import fallback as fallback_module
from .helpers import ScriptedStrategy, make_record

MESSAGES = [ChatMessage(role="user", content="Hi")]


@pytest.fixture()
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(fallback_module, "asyncio", SimpleNamespace(sleep=fake_sleep))
    return recorded


def _keys(**keys):
    return lambda provider: keys.get(provider, "")


async def _run(models, providers, keys, config, options=None):
    return [c async for c in chat_with_fallback(models, providers, keys, MESSAGES, options, config)]


def _boom(message="boom"):
    return ProviderError(code=ErrorCode.SERVER_ERROR, message=message, provider="test")


async def test_fails_over_after_exhausting_retries(sleeps):
    a = ScriptedStrategy("pa", [_boom("A down")])
    b = ScriptedStrategy("pb", [RuntimeError("B down")])
    c = ScriptedStrategy("pc", [["ok", "ok!"]])
    models = [make_record("C", "pc", 3), make_record("A", "pa", 1), make_record("B", "pb", 2)]
    chunks = await _run(
        models,
        {"pa": a, "pb": b, "pc": c},
        _keys(pa="ka", pb="kb", pc="kc"),
        FallbackConfig(max_retries=2, retry_delay_ms=1000),
    )
    assert len(a.calls) == 3 and len(b.calls) == 3 and len(c.calls) == 1  # nosec B101
    assert sleeps == [1.0, 2.0, 1.0, 2.0]  # nosec B101
    assert [(x.text, x.model_used) for x in chunks] == [("ok", "C"), ("ok!", "C")]  # nosec B101
    assert c.calls[0]["api_key"] == "kc"  # nosec B101


async def test_retry_succeeds_on_same_model(sleeps):
    a = ScriptedStrategy("pa", [_boom(), ["fine"]])
    b = ScriptedStrategy("pb", [["never"]])
    chunks = await _run(
        [make_record("A", "pa", 1), make_record("B", "pb", 2)],
        {"pa": a, "pb": b},
        _keys(pa="k", pb="k"),
        FallbackConfig(max_retries=1, retry_delay_ms=250),
    )
    assert [x.model_used for x in chunks] == ["A"]  # nosec B101
    assert sleeps == [0.25]  # nosec B101
    assert b.calls == []  # nosec B101


async def test_disabled_fallback_stops_after_first_model(sleeps):
    a = ScriptedStrategy("pa", [_boom("A down")])
    b = ScriptedStrategy("pb", [["never"]])
    with pytest.raises(AllModelsFailedError) as exc:
        await _run(
            [make_record("A", "pa", 1), make_record("B", "pb", 2)],
            {"pa": a, "pb": b},
            _keys(pa="k", pb="k"),
            FallbackConfig(max_retries=0, retry_delay_ms=0, enable_fallback=False),
        )
    assert [(f.model, f.error) for f in exc.value.failures] == [("A", "A down")]  # nosec B101
    assert "• A: A down" in str(exc.value)  # nosec B101
    assert b.calls == []  # nosec B101
    assert sleeps == []  # nosec B101


async def test_missing_key_is_skipped_without_retry(sleeps):
    a = ScriptedStrategy("pa", [["unused"]])
    b = ScriptedStrategy("pb", [["Hi", "Hi there"]])
    chunks = await _run(
        [make_record("A", "pa", 1), make_record("B", "pb", 2)],
        {"pa": a, "pb": b},
        _keys(pb="kb"),
        FallbackConfig(max_retries=2, retry_delay_ms=1000),
    )
    assert [(x.text, x.model_used) for x in chunks] == [("Hi", "B"), ("Hi there", "B")]  # nosec B101
    assert a.calls == [] and sleeps == []  # nosec B101


async def test_exhaustion_lists_skipped_and_failed_models(sleeps):
    b = ScriptedStrategy("pb", [_boom("quota exceeded")])
    with pytest.raises(AllModelsFailedError) as exc:
        await _run(
            [make_record("A", "pa", 1), make_record("B", "pb", 2), make_record("C", "pc", 3)],
            {"pb": b, "pc": ScriptedStrategy("pc", [["x"]])},
            _keys(pb="k"),
            FallbackConfig(max_retries=1, retry_delay_ms=10),
        )
    assert [(f.model, f.error) for f in exc.value.failures] == [  # nosec B101
        ("A", "Provider not found"),
        ("B", "quota exceeded"),
        ("C", "API key not configured"),
    ]
    assert len(b.calls) == 2  # nosec B101


async def test_preferred_model_goes_first_then_priority_order(sleeps):
    a = ScriptedStrategy("pa", [["from A"]])
    b = ScriptedStrategy("pb", [_boom("B down")])
    c = ScriptedStrategy("pc", [["from C"]])
    models = [make_record("A", "pa", 1), make_record("B", "pb", 2), make_record("C", "pc", 3)]
    stream = chat_with_fallback(
        models,
        {"pa": a, "pb": b, "pc": c},
        _keys(pa="ka", pb="kb", pc="kc"),
        MESSAGES,
        None,
        FallbackConfig(max_retries=0),
        preferred_id="B",
    )
    chunks = [x async for x in stream]
    assert len(b.calls) == 1 and len(a.calls) == 1 and c.calls == []  # nosec B101
    assert [x.model_used for x in chunks] == ["A"]  # nosec B101


async def test_inactive_or_unknown_preferred_id_is_ignored(sleeps):
    a = ScriptedStrategy("pa", [["from A"]])
    b = ScriptedStrategy("pb", [["from B"]])
    models = [make_record("A", "pa", 1), make_record("B", "pb", 2, is_active=False)]
    for preferred in ("B", "missing"):
        stream = chat_with_fallback(
            models, {"pa": a, "pb": b}, _keys(pa="ka", pb="kb"), MESSAGES, preferred_id=preferred
        )
        assert [x.model_used async for x in stream] == ["A"]  # nosec B101
    assert b.calls == []  # nosec B101


async def test_no_active_model_raises_before_any_call():
    a = ScriptedStrategy("pa", [["x"]])
    with pytest.raises(NoActiveModelError):
        await _run([make_record("A", "pa", 1, is_active=False)], {"pa": a}, _keys(pa="k"), FallbackConfig())
    with pytest.raises(NoActiveModelError):
        await _run([], {"pa": a}, _keys(pa="k"), FallbackConfig())
    assert a.calls == []  # nosec B101


async def test_inactive_models_never_attempted(sleeps):
    a = ScriptedStrategy("pa", [["a"]])
    b = ScriptedStrategy("pb", [["b"]])
    chunks = await _run(
        [make_record("A", "pa", 1, is_active=False), make_record("B", "pb", 2)],
        {"pa": a, "pb": b},
        _keys(pa="k", pb="k"),
        FallbackConfig(),
    )
    assert [x.model_used for x in chunks] == ["B"] and a.calls == []  # nosec B101


async def test_failure_after_output_is_not_retried_or_failed_over(sleeps):
    a = ScriptedStrategy("pa", [["partial", _boom("stream cut")]])
    b = ScriptedStrategy("pb", [["b"]])
    received = []
    with pytest.raises(AllModelsFailedError) as exc:
        async for chunk in chat_with_fallback(
            [make_record("A", "pa", 1), make_record("B", "pb", 2)],
            {"pa": a, "pb": b},
            _keys(pa="k", pb="k"),
            MESSAGES,
            None,
            FallbackConfig(max_retries=2, retry_delay_ms=10),
        ):
            received.append(chunk.text)
    assert received == ["partial"]  # nosec B101
    assert len(a.calls) == 1 and b.calls == []  # nosec B101
    assert exc.value.failures[-1].error == "stream cut"  # nosec B101


async def test_cancellation_is_never_retried(sleeps):
    token = CancellationToken()
    a = ScriptedStrategy("pa", [["one", "two"]])
    b = ScriptedStrategy("pb", [["b"]])
    received = []
    with pytest.raises(CancelledError):
        async for chunk in chat_with_fallback(
            [make_record("A", "pa", 1), make_record("B", "pb", 2)],
            {"pa": a, "pb": b},
            _keys(pa="k", pb="k"),
            MESSAGES,
            ChatOptions(cancellation=token),
            FallbackConfig(max_retries=2, retry_delay_ms=10),
        ):
            received.append(chunk.text)
            token.cancel("stop")
    assert received == ["one"]  # nosec B101
    assert len(a.calls) == 1 and b.calls == [] and sleeps == []  # nosec B101


async def test_cancelled_token_checked_before_first_attempt():
    token = CancellationToken()
    token.cancel()
    a = ScriptedStrategy("pa", [["x"]])
    with pytest.raises(CancelledError):
        await _run([make_record("A", "pa", 1)], {"pa": a}, _keys(pa="k"), FallbackConfig(), ChatOptions(cancellation=token))
    assert a.calls == []  # nosec B101


async def test_consumer_close_closes_adapter_stream(sleeps):
    a = ScriptedStrategy("pa", [["one", "two", "three"]])
    gen = chat_with_fallback([make_record("A", "pa", 1)], {"pa": a}, _keys(pa="k"), MESSAGES)
    first = await gen.__anext__()
    assert first == StreamChunk(text="one", model_used="A")  # nosec B101
    await gen.aclose()
    assert a.closed == 1  # nosec B101


def test_fallback_config_delays_are_linear():
    assert list(FallbackConfig(max_retries=3, retry_delay_ms=500).delays()) == [0.5, 1.0, 1.5]  # nosec B101
    assert list(FallbackConfig(max_retries=0).delays()) == []  # nosec B101
