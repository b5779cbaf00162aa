"""ModelManager facade over an in-memory store and scripted adapters."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import ValidationError

from ..base.errors import AllModelsFailedError, ConfigurationError, ErrorCode, ModelRegistryError, NoActiveModelError
from ..base.resilience import FallbackConfig
from ..config import Settings
from ..config.defaults import DEFAULT_MODELS, DEFAULT_PROVIDERS, STORAGE_KEY_FALLBACK_CONFIG
from ..openai_compat import build_preset
from ..service import ModelManager
from .helpers import ScriptedStrategy

SETTINGS = Settings(seed_defaults=False, retry_delay_ms=0)


def _manager(store, strategies, settings=SETTINGS) -> ModelManager:
    return ModelManager(store, strategies, settings)


async def test_chat_validates_and_tags_chunks(store):
    strategy = ScriptedStrategy("openai", [["Hel", "Hello"]])
    manager = _manager(store, {"openai": strategy})
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    manager.add_model(provider_name="openai", model_id="gpt-4o", display_name="GPT-4o")
    chunks = [c async for c in manager.chat([{"role": "user", "content": "Hi"}])]
    assert [(c.text, c.model_used) for c in chunks] == [("Hel", "GPT-4o"), ("Hello", "GPT-4o")]  # nosec B101
    assert strategy.calls[0]["api_key"] == "sk-abcdefghijklmnop"  # nosec B101
    assert strategy.calls[0]["messages"][0].content == "Hi"  # nosec B101


async def test_chat_rejects_invalid_messages_before_any_call(store):
    strategy = ScriptedStrategy("openai", [["x"]])
    manager = _manager(store, {"openai": strategy})
    with pytest.raises(ValidationError):
        [c async for c in manager.chat([{"role": "user", "content": "  "}])]
    with pytest.raises(ValidationError):
        [c async for c in manager.chat([])]
    assert strategy.calls == []  # nosec B101


async def test_chat_without_models_raises_no_active_model(store):
    manager = _manager(store, {})
    with pytest.raises(NoActiveModelError):
        [c async for c in manager.chat([{"role": "user", "content": "Hi"}])]


async def test_chat_uses_configured_fallback_policy(store):
    strategy = ScriptedStrategy("openai", [RuntimeError("down")])
    manager = _manager(store, {"openai": strategy})
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    manager.add_model(provider_name="openai", model_id="a")
    manager.set_fallback_config(max_retries=0)
    with pytest.raises(AllModelsFailedError):
        [c async for c in manager.chat([{"role": "user", "content": "Hi"}])]
    assert len(strategy.calls) == 1  # nosec B101


async def test_chat_answers_with_selected_model_first(store):
    openai = ScriptedStrategy("openai", [["from A"]])
    groq = ScriptedStrategy("groq", [["from B"]])
    manager = _manager(store, {"openai": openai, "groq": groq})
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    manager.configure_api_key("groq", "gsk-abcdefghijklmnop")
    manager.add_model(provider_name="openai", model_id="a", display_name="A", priority=1)
    b = manager.add_model(provider_name="groq", model_id="b", display_name="B", priority=2)
    manager.select_active_model(b.id)
    chunks = [c async for c in manager.chat([{"role": "user", "content": "Hi"}])]
    assert {c.model_used for c in chunks} == {"B"}  # nosec B101
    assert openai.calls == []  # nosec B101


async def test_chat_falls_back_to_priority_chain_when_selection_fails(store):
    openai = ScriptedStrategy("openai", [["from A"]])
    groq = ScriptedStrategy("groq", [RuntimeError("B down")])
    manager = _manager(store, {"openai": openai, "groq": groq})
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    manager.configure_api_key("groq", "gsk-abcdefghijklmnop")
    manager.add_model(provider_name="openai", model_id="a", display_name="A", priority=1)
    manager.add_model(provider_name="groq", model_id="b", display_name="B", priority=2, is_default=True)
    manager.set_fallback_config(max_retries=0)
    chunks = [c async for c in manager.chat([{"role": "user", "content": "Hi"}])]
    assert len(groq.calls) == 1  # nosec B101
    assert {c.model_used for c in chunks} == {"A"}  # nosec B101


async def test_connection_with_invalid_key_reports_failure_and_caches_status(store):
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})

    openai = build_preset("openai", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    manager = _manager(store, {"openai": openai})
    result = await manager.test_connection("openai", "sk-invalid")
    assert result.success is False  # nosec B101
    assert result.error == "Incorrect API key provided"  # nosec B101
    status = {s.name: s for s in manager.provider_statuses()}["openai"]
    assert status.last_test.success is False and status.last_test.tested_at  # nosec B101
    await manager.aclose()


async def test_connection_unknown_provider_and_missing_key(store):
    manager = _manager(store, {"openai": ScriptedStrategy("openai", [])})
    unknown = await manager.test_connection("nope")
    missing = await manager.test_connection("openai")
    assert (unknown.success, unknown.error) == (False, "Provider not found")  # nosec B101
    assert (missing.success, missing.error) == (False, "API key not configured")  # nosec B101


async def test_connection_uses_stored_key(store):
    manager = _manager(store, {"openai": ScriptedStrategy("openai", [])})
    manager.configure_api_key("openai", "good-key")
    assert (await manager.test_connection("openai")).success is True  # nosec B101


def test_add_model_rejects_duplicates_and_invalid_forms(store):
    manager = _manager(store, {})
    manager.add_model(provider_name="openai", model_id="gpt-4o")
    with pytest.raises(ModelRegistryError) as exc:
        manager.add_model(provider_name="openai", model_id=" gpt-4o ")
    assert exc.value.code is ErrorCode.CONFLICT  # nosec B101
    with pytest.raises(ValidationError):
        manager.add_model(provider_name="", model_id="x")
    with pytest.raises(ValidationError):
        manager.add_model(provider_name="openai", model_id="x", priority=-1)


def test_remove_model_clears_dangling_selection(store):
    manager = _manager(store, {})
    a = manager.add_model(provider_name="openai", model_id="a", priority=1)
    b = manager.add_model(provider_name="openrouter", model_id="b", priority=2)
    manager.select_active_model(a.id)
    assert manager.get_active_model().id == a.id  # nosec B101
    assert manager.remove_model(a.id) is True  # nosec B101
    assert manager.registry.active_model_id() is None  # nosec B101
    assert manager.get_active_model().id == b.id  # nosec B101


def test_get_active_model_falls_back_when_selection_inactive(store):
    manager = _manager(store, {})
    a = manager.add_model(provider_name="openai", model_id="a", priority=1)
    b = manager.add_model(provider_name="groq", model_id="b", priority=2, is_default=True)
    manager.select_active_model(a.id)
    manager.set_model_active(a.id, False)
    assert manager.get_active_model().id == b.id  # nosec B101


def test_select_unknown_model_raises(store):
    with pytest.raises(ModelRegistryError) as exc:
        _manager(store, {}).select_active_model("missing")
    assert exc.value.code is ErrorCode.NOT_FOUND  # nosec B101


def test_keys_are_masked_and_removable(store):
    manager = _manager(store, {})
    manager.configure_api_key("openai", "sk-1234567890abcd")
    assert manager.masked_api_key("openai") == "sk-1••••••••abcd"  # nosec B101
    assert manager.remove_api_key("openai") is True  # nosec B101
    assert manager.masked_api_key("openai") is None  # nosec B101


def test_fallback_config_validated_and_persisted(store):
    manager = _manager(store, {})
    assert manager.get_fallback_config() == FallbackConfig(max_retries=2, retry_delay_ms=0)  # nosec B101
    manager.set_fallback_config(retry_delay_ms=500, enable_fallback=False)
    assert json.loads(store.get(STORAGE_KEY_FALLBACK_CONFIG)) == {  # nosec B101
        "max_retries": 2,
        "retry_delay_ms": 500,
        "enable_fallback": False,
    }
    assert _manager(store, {}).get_fallback_config().enable_fallback is False  # nosec B101
    with pytest.raises(ValidationError):
        manager.set_fallback_config(max_retries=-1)
    assert manager.get_fallback_config().retry_delay_ms == 500  # nosec B101


def test_reset_to_defaults_restores_catalog_and_policy_but_keeps_keys(store):
    manager = _manager(store, {}, Settings(seed_defaults=True))
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    manager.add_model(provider_name="openai", model_id="custom")
    manager.set_fallback_config(max_retries=0)
    records = manager.reset_to_defaults()
    assert len(records) == len(DEFAULT_MODELS)  # nosec B101
    assert manager.get_fallback_config().max_retries == 2  # nosec B101
    assert manager.credentials.has("openai") is True  # nosec B101


def test_list_providers_includes_builtins_and_extra_strategies(store):
    manager = _manager(store, {"custom": ScriptedStrategy("custom", [], display_name="Custom")})
    names = [p.name for p in manager.list_providers()]
    assert names[: len(DEFAULT_PROVIDERS)] == [p.name for p in DEFAULT_PROVIDERS]  # nosec B101
    assert names[-1] == "custom"  # nosec B101


async def test_list_available_models_errors(store):
    manager = _manager(store, {"custom": ScriptedStrategy("custom", [])})
    with pytest.raises(ConfigurationError) as unknown:
        await manager.list_available_models("nope")
    with pytest.raises(ConfigurationError) as unsupported:
        await manager.list_available_models("custom")
    assert unknown.value.code is ErrorCode.NOT_FOUND  # nosec B101
    assert unsupported.value.code is ErrorCode.UNSUPPORTED  # nosec B101


async def test_list_available_models_requires_key(store):
    openai = build_preset("openai", client=httpx.AsyncClient(transport=httpx.MockTransport(
        lambda r: httpx.Response(200, json={"data": [{"id": "gpt-4o"}]})
    )))
    manager = _manager(store, {"openai": openai})
    with pytest.raises(ConfigurationError):
        await manager.list_available_models("openai")
    manager.configure_api_key("openai", "sk-abcdefghijklmnop")
    assert [m.id for m in await manager.list_available_models("openai")] == ["gpt-4o"]  # nosec B101


async def test_aclose_closes_adapters(store):
    strategy = ScriptedStrategy("openai", [])
    await _manager(store, {"openai": strategy}).aclose()
    assert strategy.aclose_calls == 1  # nosec B101
