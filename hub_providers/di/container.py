"""Dependency injection container for the providers core.

Goals:
- Centralize construction of the process-lifetime store, repositories,
  adapters and the :class:`ModelManager` facade.
- Keep consumers free of ambient globals; everything hangs off one container.

Tests build a container over an in-memory store and inject fake adapters
through ``strategies``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..base.interfaces import ProviderStrategy
from ..base.logging import get_logger, log_event
from ..base.repositories import CredentialStore, ModelRegistry
from ..config import Settings, get_settings
from ..config.env import resolve_provider_key_env
from ..gemini import GeminiProvider
from ..openai_compat import PRESET_HOOKS, build_preset
from ..openrouter import OpenRouterProvider
from ..persistence import KeyValueStore, SqliteKeyValueStore
from ..service.model_manager import ModelManager


def build_strategies(settings: Settings) -> Dict[str, ProviderStrategy]:
    """Instantiate every built-in adapter keyed by provider name.

    ``anthropic`` is listed as a provider but has no adapter; chats routed to
    it are skipped with "Provider not found".
    """
    urls = settings.base_urls
    strategies: Dict[str, ProviderStrategy] = {
        "openrouter": OpenRouterProvider(
            app_title=settings.app_title,
            app_referer=settings.app_referer,
            base_url=urls.get("openrouter"),
        ),
        "google": GeminiProvider(base_url=urls.get("google")),
    }
    for name in PRESET_HOOKS:
        strategies[name] = build_preset(name, base_url=urls.get(name))
    return strategies


class ProvidersContainer:
    """Lazily builds and caches shared singletons.

    Parameters
    ----------
    settings:
        Resolved settings; :func:`get_settings` is used when omitted.
    store:
        Optional pre-built key-value store (defaults to SQLite at
        ``settings.db_path``).
    strategies:
        Optional adapter mapping replacing the built-in adapters.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        store: Optional[KeyValueStore] = None,
        strategies: Optional[Mapping[str, ProviderStrategy]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._singletons: Dict[str, Any] = {}
        if store is not None:
            self._singletons["store"] = store
        if strategies is not None:
            self._singletons["strategies"] = dict(strategies)
        self._logger = get_logger("di")

    def store(self) -> KeyValueStore:
        if "store" not in self._singletons:
            self._singletons["store"] = SqliteKeyValueStore(self.settings.db_path)
        return self._singletons["store"]

    def credentials(self) -> CredentialStore:
        if "credentials" not in self._singletons:
            creds = CredentialStore(
                self.store(),
                origin=self.settings.origin,
                encryption_secret=self.settings.encryption_secret,
            )
            self._singletons["credentials"] = creds
            if self.settings.import_env_keys:
                self._import_env_keys(creds)
        return self._singletons["credentials"]

    def registry(self) -> ModelRegistry:
        if "registry" not in self._singletons:
            self._singletons["registry"] = ModelRegistry(self.store(), seed_defaults=self.settings.seed_defaults)
        return self._singletons["registry"]

    def strategies(self) -> Dict[str, ProviderStrategy]:
        if "strategies" not in self._singletons:
            self._singletons["strategies"] = build_strategies(self.settings)
        return self._singletons["strategies"]

    def manager(self) -> ModelManager:
        if "manager" not in self._singletons:
            self._singletons["manager"] = ModelManager(
                self.store(),
                self.strategies(),
                self.settings,
                credentials=self.credentials(),
                registry=self.registry(),
            )
        return self._singletons["manager"]

    def _import_env_keys(self, creds: CredentialStore) -> None:
        """Copy ``<PROVIDER>_API_KEY`` env values for providers without a stored key."""
        names = set(self.strategies())
        for provider in sorted(names):
            if creds.has(provider):
                continue
            value = resolve_provider_key_env(provider)
            if value:
                creds.save(provider, value)
                log_event(self._logger, "credentials.imported_from_env", provider=provider)

    async def aclose(self) -> None:
        """Close adapters and the store."""
        manager = self._singletons.get("manager")
        if manager is not None:
            await manager.aclose()
        store = self._singletons.get("store")
        close = getattr(store, "close", None)
        if close is not None:
            close()
        self._singletons.clear()


def build_container(
    settings: Optional[Settings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    strategies: Optional[Mapping[str, ProviderStrategy]] = None,
) -> ProvidersContainer:
    """Construct a new :class:`ProvidersContainer`."""
    return ProvidersContainer(settings, store=store, strategies=strategies)


__all__ = ["ProvidersContainer", "build_container", "build_strategies"]
