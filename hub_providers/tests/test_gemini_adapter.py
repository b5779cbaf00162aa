"""Gemini adapter with the ``google-genai`` client replaced by a fake."""

from __future__ import annotations

import base64
from types import SimpleNamespace

import pytest

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import ProviderError
from ..base.models import Attachment, ChatMessage, ChatOptions, ModelRecord
from ..config.defaults import DEFAULT_SYSTEM_INSTRUCTION, GEMINI_TEST_MODEL
from ..gemini import GeminiProvider
from ..gemini import client as gemini_client
from ..gemini.client import build_config, build_contents


def _frame(*parts, sources=None):
    metadata = None
    if sources:
        metadata = SimpleNamespace(
            grounding_chunks=[SimpleNamespace(web=SimpleNamespace(title=t, uri=u)) for t, u in sources]
        )
    content = SimpleNamespace(parts=[SimpleNamespace(text=t, thought=th) for t, th in parts])
    return SimpleNamespace(candidates=[SimpleNamespace(content=content, grounding_metadata=metadata)])


class FakeModels:
    def __init__(self, frames=None, error=None, reply="pong", listing=None):
        self.frames = frames or []
        self.error = error
        self.reply = reply
        self.listing = listing or []
        self.calls = []
        self.stream_closed = False

    async def generate_content_stream(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error

        async def _gen():
            try:
                for frame in self.frames:
                    yield frame
            finally:
                self.stream_closed = True

        return _gen()

    async def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)

    async def list(self):
        async def _pager():
            for item in self.listing:
                yield item

        return _pager()


class FakeAio:
    def __init__(self, models):
        self.models = models
        self.closed = 0

    async def aclose(self):
        self.closed += 1


@pytest.fixture()
def fake_models(monkeypatch):
    models = FakeModels()
    models.keys = []
    models.clients = []

    def _client(api_key):
        models.keys.append(api_key)
        client = SimpleNamespace(aio=FakeAio(models))
        models.clients.append(client)
        return client

    monkeypatch.setattr(gemini_client, "genai", SimpleNamespace(Client=_client))
    return models


def _model():
    return ModelRecord(id="g", provider_name="google", model_id="gemini-2.5-flash", display_name="Gemini")


async def test_streams_text_reasoning_and_sources(fake_models):
    fake_models.frames = [
        _frame(("planning", True)),
        _frame(("Hello", False)),
        _frame((" world", False), sources=[("Example", "https://example.com")]),
    ]
    provider = GeminiProvider()
    chunks = [c async for c in provider.chat(_model(), [ChatMessage(role="user", content="Hi")], "g-key")]
    assert [c.text for c in chunks] == ["", "Hello", "Hello world", "Hello world"]  # nosec B101
    assert chunks[0].reasoning == "planning"  # nosec B101
    assert chunks[-1].is_complete and chunks[-1].sources[0].uri == "https://example.com"  # nosec B101
    assert fake_models.keys == ["g-key"]  # nosec B101
    assert fake_models.calls[0]["model"] == "gemini-2.5-flash"  # nosec B101


async def test_sdk_error_is_wrapped():
    provider = GeminiProvider()
    models = FakeModels(error=RuntimeError("API key not valid"))
    provider._client = lambda api_key: SimpleNamespace(aio=SimpleNamespace(models=models))
    with pytest.raises(ProviderError) as exc:
        [c async for c in provider.chat(_model(), [ChatMessage(role="user", content="Hi")], "k")]
    assert exc.value.message == "Gemini: API key not valid"  # nosec B101
    assert exc.value.provider == "google"  # nosec B101


async def test_early_close_closes_sdk_stream(fake_models):
    fake_models.frames = [_frame(("a", False)), _frame(("b", False))]
    gen = GeminiProvider().chat(_model(), [ChatMessage(role="user", content="Hi")], "k")
    assert (await gen.__anext__()).text == "a"  # nosec B101
    await gen.aclose()
    assert fake_models.stream_closed is True  # nosec B101


async def test_cancellation(fake_models):
    fake_models.frames = [_frame(("a", False)), _frame(("b", False))]
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError):
        [c async for c in GeminiProvider().chat(_model(), [ChatMessage(role="user", content="Hi")], "k", ChatOptions(cancellation=token))]


async def test_connection_test(fake_models):
    ok = await GeminiProvider().test_connection("k")
    assert ok.success and ok.detail == "Connection to Gemini established"  # nosec B101
    assert fake_models.calls[0]["model"] == GEMINI_TEST_MODEL  # nosec B101
    fake_models.reply = ""
    empty = await GeminiProvider().test_connection("k")
    assert empty.success is False and empty.error == "Empty response from server"  # nosec B101
    fake_models.error = RuntimeError("PERMISSION_DENIED")
    failed = await GeminiProvider().test_connection("k")
    assert failed.success is False and failed.error == "PERMISSION_DENIED"  # nosec B101


async def test_list_models_filters_generate_content(fake_models):
    fake_models.listing = [
        SimpleNamespace(name="models/gemini-2.5-pro", display_name="Gemini 2.5 Pro", input_token_limit=1048576, supported_actions=["generateContent"]),
        SimpleNamespace(name="models/text-embedding-004", display_name="Embedding", input_token_limit=2048, supported_actions=["embedContent"]),
    ]
    models = await GeminiProvider().list_available_models("k")
    assert [(m.id, m.name, m.context_length) for m in models] == [("gemini-2.5-pro", "Gemini 2.5 Pro", 1048576)]  # nosec B101


async def test_list_models_returns_empty_on_failure(fake_models):
    fake_models.list = None
    assert await GeminiProvider().list_available_models("k") == []  # nosec B101


def test_build_contents_maps_roles_and_attachments():
    png = base64.b64encode(b"\x89PNG").decode()
    contents = build_contents(
        [
            ChatMessage(role="system", content="rules"),
            ChatMessage(role="user", content="see", attachments=[Attachment("image/png", "a.png", png), Attachment("text/csv", "d.csv", "a,b")]),
            ChatMessage(role="assistant", content="ok"),
        ]
    )
    assert [c["role"] for c in contents] == ["user", "model"]  # nosec B101
    parts = contents[0]["parts"]
    assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": b"\x89PNG"}}  # nosec B101
    assert parts[2] == {"text": "[File: d.csv]\na,b"}  # nosec B101


def test_build_config_defaults_and_web_search():
    plain = build_config([ChatMessage(role="user", content="x")], ChatOptions())
    assert plain == {"system_instruction": DEFAULT_SYSTEM_INSTRUCTION}  # nosec B101
    cfg = build_config(
        [ChatMessage(role="system", content="extra")],
        ChatOptions(system_instruction="main", max_tokens=64, web_search=True, stop_sequences=["END"]),
    )
    assert cfg["system_instruction"] == "main\n\nextra"  # nosec B101
    assert cfg["max_output_tokens"] == 64 and cfg["stop_sequences"] == ["END"]  # nosec B101
    assert cfg["tools"] == [{"google_search": {}}]  # nosec B101


async def test_chat_reuses_one_client_per_key_until_aclose(fake_models):
    fake_models.frames = [_frame(("a", False))]
    provider = GeminiProvider()
    messages = [ChatMessage(role="user", content="Hi")]
    for key in ("k1", "k1", "k2"):
        [c async for c in provider.chat(_model(), messages, key)]
    await provider.list_available_models("k1")
    assert fake_models.keys == ["k1", "k2"]  # nosec B101
    assert [c.aio.closed for c in fake_models.clients] == [0, 0]  # nosec B101
    await provider.aclose()
    assert [c.aio.closed for c in fake_models.clients] == [1, 1]  # nosec B101
    await provider.aclose()
    assert [c.aio.closed for c in fake_models.clients] == [1, 1]  # nosec B101


async def test_connection_test_closes_its_client(fake_models):
    provider = GeminiProvider()
    await provider.test_connection("k")
    fake_models.error = RuntimeError("PERMISSION_DENIED")
    await provider.test_connection("k")
    assert [c.aio.closed for c in fake_models.clients] == [1, 1]  # nosec B101
