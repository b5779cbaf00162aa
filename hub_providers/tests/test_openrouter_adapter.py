"""OpenRouter adapter: identity headers, catalog listing, connection test."""

from __future__ import annotations

import httpx
import pytest

from ..base.errors import ErrorCode, ProviderError
from ..base.models import ChatMessage, ModelRecord
from ..openrouter import OpenRouterProvider
from ..openrouter.client import parse_model_entry
from .helpers import sse_frame

CATALOG = {
    "data": [
        {
            "id": "openai/gpt-4o",
            "name": "OpenAI: GPT-4o",
            "context_length": 128000,
            "pricing": {"prompt": "0.0000025", "completion": "0.00001"},
        },
        {"id": "meta-llama/llama-3.3-70b-instruct:free", "pricing": {"prompt": "0", "completion": "0"}},
    ]
}


def _provider(handler) -> OpenRouterProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouterProvider(app_title="Test App", app_referer="https://app.test", client=client)


async def test_chat_sends_identity_headers():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        seen["url"] = str(request.url)
        return httpx.Response(200, content=sse_frame("Hi") + b"data: [DONE]\n\n")

    model = ModelRecord(id="r", provider_name="openrouter", model_id="openrouter/auto", display_name="Auto")
    chunks = [c async for c in _provider(handler).chat(model, [ChatMessage(role="user", content="Hi")], "or-key")]
    assert chunks[-1].text == "Hi" and chunks[-1].is_complete  # nosec B101
    assert seen["x-title"] == "Test App"  # nosec B101
    assert seen["http-referer"] == "https://app.test"  # nosec B101
    assert seen["authorization"] == "Bearer or-key"  # nosec B101
    assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"  # nosec B101


async def test_list_models_parses_pricing_and_context():
    models = await _provider(lambda r: httpx.Response(200, json=CATALOG)).list_available_models("k")
    assert [m.id for m in models] == ["openai/gpt-4o", "meta-llama/llama-3.3-70b-instruct:free"]  # nosec B101
    gpt = models[0]
    assert gpt.name == "OpenAI: GPT-4o" and gpt.context_length == 128000  # nosec B101
    assert gpt.pricing.input_per_million == pytest.approx(2.5)  # nosec B101
    assert gpt.pricing.output_per_million == pytest.approx(10.0)  # nosec B101
    assert models[1].name == models[1].id  # nosec B101
    assert models[1].pricing.input_per_million == 0  # nosec B101


async def test_list_models_raises_on_http_error():
    provider = _provider(lambda r: httpx.Response(401, json={"error": {"message": "No auth credentials found"}}))
    with pytest.raises(ProviderError) as exc:
        await provider.list_available_models("bad")
    assert exc.value.message == "No auth credentials found"  # nosec B101
    assert exc.value.code is ErrorCode.AUTH  # nosec B101


async def test_list_models_raises_on_malformed_body():
    provider = _provider(lambda r: httpx.Response(200, json={"data": [{"name": "no id"}]}))
    with pytest.raises(ProviderError) as exc:
        await provider.list_available_models("k")
    assert exc.value.code is ErrorCode.DECODE  # nosec B101


async def test_connection_test_reports_catalog_size():
    ok = await _provider(lambda r: httpx.Response(200, json=CATALOG)).test_connection("k")
    bad = await _provider(lambda r: httpx.Response(401, json={"error": {"message": "Invalid key"}})).test_connection("k")
    assert ok.success and ok.detail == "2 models available"  # nosec B101
    assert bad.success is False and bad.error == "Invalid key"  # nosec B101


def test_parse_model_entry_without_pricing():
    info = parse_model_entry({"id": "x/y"})
    assert info.pricing.input_per_million is None  # nosec B101
    assert info.context_length is None  # nosec B101
