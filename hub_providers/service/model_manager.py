"""Model Manager facade.

Single consumer-facing surface composing the credential store, the model
registry, the provider adapters and the fallback orchestrator. Every
dependency is injected at construction; nothing is read from ambient globals.

Pass-through accessors delegate to the registry or credential store. The
facade adds only input validation (pydantic DTOs), duplicate detection on
add, clearing a dangling active selection on remove, and caching connection
test results.
"""

from __future__ import annotations

import json
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Iterable, List, Mapping, Optional, Sequence

from ..base.dto import FallbackConfigDTO, ModelFormDTO, validate_messages
from ..base.errors import ConfigurationError, ErrorCode, ModelRegistryError
from ..base.interfaces import ModelListingProvider, ProviderStrategy
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import (
    ChatOptions,
    ConnectionTestResult,
    ModelRecord,
    ProviderDescriptor,
    ProviderStatus,
    RemoteModelInfo,
    StreamChunk,
)
from ..base.repositories import CredentialStore, ModelRegistry
from ..base.resilience.fallback import (
    API_KEY_NOT_CONFIGURED,
    PROVIDER_NOT_FOUND,
    FallbackConfig,
    chat_with_fallback,
)
from ..config import Settings
from ..config.defaults import DEFAULT_PROVIDERS, STORAGE_KEY_FALLBACK_CONFIG
from ..persistence.interfaces import KeyValueStore


class ModelManager:
    """Facade over registry, credentials, adapters and the orchestrator.

    Parameters
    ----------
    store:
        Key-value store backing the registry and the credential store.
    strategies:
        Provider name -> adapter mapping.
    settings:
        Resolved settings; defaults apply when omitted.
    credentials, registry:
        Optional pre-built collaborators (tests share one store between them).
    """

    def __init__(
        self,
        store: KeyValueStore,
        strategies: Mapping[str, ProviderStrategy],
        settings: Optional[Settings] = None,
        *,
        credentials: Optional[CredentialStore] = None,
        registry: Optional[ModelRegistry] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._store = store
        self._strategies: Dict[str, ProviderStrategy] = dict(strategies)
        self.credentials = credentials or CredentialStore(
            store, origin=self._settings.origin, encryption_secret=self._settings.encryption_secret
        )
        self.registry = registry or ModelRegistry(store, seed_defaults=self._settings.seed_defaults)
        self._descriptors = self._build_descriptors()
        self._fallback = self._load_fallback_config()
        self._logger = get_logger("service.manager")

    def _build_descriptors(self) -> List[ProviderDescriptor]:
        known = {d.name for d in DEFAULT_PROVIDERS}
        extra = [
            ProviderDescriptor(s.name, s.display_name, s.base_url)
            for name, s in self._strategies.items()
            if name not in known
        ]
        return list(DEFAULT_PROVIDERS) + extra

    # ---- chat ----
    async def chat(
        self, messages: Iterable[Any], options: Optional[ChatOptions] = None
    ) -> AsyncIterator[StreamChunk]:
        """Validate ``messages`` and stream the orchestrator's chunks unchanged.

        The model from :meth:`get_active_model` is tried first; the other
        active models follow in priority order.

        Raises:
            pydantic.ValidationError: invalid messages.
            NoActiveModelError: no active model is configured.
            AllModelsFailedError: every candidate failed.
        """
        validated = validate_messages(messages)
        preferred = self.get_active_model()
        stream = chat_with_fallback(
            self.registry.list(),
            self._strategies,
            self.credentials.get,
            validated,
            options,
            self._fallback,
            preferred_id=preferred.id if preferred else None,
        )
        async with aclosing(stream) as chunks:
            async for chunk in chunks:
                yield chunk

    # ---- providers ----
    def list_providers(self) -> List[ProviderDescriptor]:
        return list(self._descriptors)

    def get_strategy(self, name: str) -> Optional[ProviderStrategy]:
        return self._strategies.get(name)

    def provider_statuses(self) -> List[ProviderStatus]:
        return self.registry.provider_statuses(self._descriptors, self.credentials)

    async def test_connection(self, provider: str, api_key: Optional[str] = None) -> ConnectionTestResult:
        """Test a provider with ``api_key`` or the stored key; never raises.

        The result is cached as the provider's last test status.
        """
        strategy = self._strategies.get(provider)
        if strategy is None:
            return ConnectionTestResult.failure(PROVIDER_NOT_FOUND)
        key = api_key or self.credentials.get(provider)
        if not key:
            result = ConnectionTestResult.failure(API_KEY_NOT_CONFIGURED)
        else:
            try:
                result = await strategy.test_connection(key)
            except Exception as exc:  # noqa: BLE001 - a test result is always returned
                result = ConnectionTestResult.failure(str(exc) or exc.__class__.__name__)
        log_event(
            self._logger,
            "provider.tested",
            LogContext(provider=provider, operation="test_connection"),
            level=logging.INFO if result.success else logging.WARNING,
            success=result.success,
            latency_ms=result.latency_ms,
        )
        return self.registry.record_test_result(provider, result)

    async def list_available_models(self, provider: str) -> List[RemoteModelInfo]:
        """Remote catalog of ``provider`` using the stored key.

        Raises:
            ConfigurationError: unknown provider, no listing capability or no key.
        """
        strategy = self._strategies.get(provider)
        if strategy is None:
            raise ConfigurationError(PROVIDER_NOT_FOUND, code=ErrorCode.NOT_FOUND)
        if not isinstance(strategy, ModelListingProvider):
            raise ConfigurationError(f"{provider} does not support model listing", code=ErrorCode.UNSUPPORTED)
        key = self.credentials.get(provider)
        if not key:
            raise ConfigurationError(API_KEY_NOT_CONFIGURED)
        return await strategy.list_available_models(key)

    # ---- credentials ----
    def configure_api_key(self, provider: str, api_key: str) -> None:
        self.credentials.save(provider, api_key)

    def remove_api_key(self, provider: str) -> bool:
        return self.credentials.remove(provider)

    def masked_api_key(self, provider: str) -> Optional[str]:
        key = self.credentials.get(provider)
        return self.credentials.mask(key) if key else None

    # ---- models ----
    def list_models(self) -> List[ModelRecord]:
        return self.registry.list()

    def add_model(self, **form: Any) -> ModelRecord:
        """Validate the add-model form and append the record.

        Raises:
            pydantic.ValidationError: invalid form.
            ModelRegistryError: the (provider, model id) pair already exists.
        """
        dto = ModelFormDTO(**form)
        if self.registry.find(dto.provider_name, dto.model_id) is not None:
            raise ModelRegistryError(
                f"Model already configured: {dto.provider_name}/{dto.model_id}", code=ErrorCode.CONFLICT
            )
        return self.registry.add(
            dto.provider_name,
            dto.model_id,
            dto.display_name,
            description=dto.description,
            priority=dto.priority,
            is_active=dto.is_active,
            is_default=dto.is_default,
            capabilities=dto.capabilities.model_dump(exclude_none=True),
            pricing=dto.pricing.model_dump(exclude_none=True) if dto.pricing else None,
        )

    def update_model(self, record_id: str, **changes: Any) -> Optional[ModelRecord]:
        return self.registry.update(record_id, **changes)

    def remove_model(self, record_id: str) -> bool:
        """Delete a model and clear the active selection when it pointed there."""
        removed = self.registry.remove(record_id)
        if removed and self.registry.active_model_id() == record_id:
            self.registry.set_active_model_id(None)
        return removed

    def set_default_model(self, record_id: str) -> bool:
        return self.registry.set_default(record_id)

    def set_model_active(self, record_id: str, active: bool = True) -> bool:
        return self.registry.set_active(record_id, active)

    def reorder_models(self, ordered_ids: Sequence[str]) -> List[ModelRecord]:
        return self.registry.reorder(ordered_ids)

    def select_active_model(self, record_id: str) -> ModelRecord:
        """Remember ``record_id`` as the UI's active selection.

        Raises:
            ModelRegistryError: unknown id.
        """
        record = self.registry.get(record_id)
        if record is None:
            raise ModelRegistryError(f"Unknown model id: {record_id}", code=ErrorCode.NOT_FOUND)
        self.registry.set_active_model_id(record_id)
        return record

    def get_active_model(self) -> Optional[ModelRecord]:
        """The selected model while it is still active, else the default model."""
        selected = self.registry.active_model_id()
        record = self.registry.get(selected) if selected else None
        if record is not None and record.is_active:
            return record
        return self.registry.default_model()

    # ---- fallback policy ----
    def _settings_fallback(self) -> FallbackConfig:
        return FallbackConfig(
            max_retries=self._settings.max_retries,
            retry_delay_ms=self._settings.retry_delay_ms,
            enable_fallback=self._settings.enable_fallback,
        )

    def _load_fallback_config(self) -> FallbackConfig:
        raw = self._store.get(STORAGE_KEY_FALLBACK_CONFIG)
        if not raw:
            return self._settings_fallback()
        try:
            return FallbackConfig(**FallbackConfigDTO.model_validate_json(raw).model_dump())
        except ValueError:
            return self._settings_fallback()

    def get_fallback_config(self) -> FallbackConfig:
        return self._fallback

    def set_fallback_config(self, **partial: Any) -> FallbackConfig:
        """Merge ``partial`` into the current policy, validate and persist it."""
        merged = {**self._fallback.to_dict(), **partial}
        dto = FallbackConfigDTO(**merged)
        self._fallback = FallbackConfig(**dto.model_dump())
        self._store.set(STORAGE_KEY_FALLBACK_CONFIG, json.dumps(self._fallback.to_dict()))
        return self._fallback

    def reset_to_defaults(self) -> List[ModelRecord]:
        """Restore the model catalog and fallback policy; stored keys stay."""
        self._store.delete(STORAGE_KEY_FALLBACK_CONFIG)
        self._fallback = self._settings_fallback()
        return self.registry.reset()

    async def aclose(self) -> None:
        """Close adapters that own network clients."""
        for strategy in self._strategies.values():
            close = getattr(strategy, "aclose", None)
            if close is not None:
                await close()


__all__ = ["ModelManager"]
