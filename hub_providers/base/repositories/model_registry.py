"""
Model Registry

Purpose
- CRUD over :class:`ModelRecord` persisted as one JSON list under
  ``ai_models_config``.
- Provider connectivity status cache (``ai_provider_status``) and the active
  model selection (``ai_active_model``).

Design
- Records are kept in list order (insertion order unless ``reorder`` ran);
  ranking ties fall back to that order.
- Every mutation persists immediately and synchronously.
- Returned records are copies; mutate through the registry methods.
- Default policy is global: ``set_default`` leaves exactly one default.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import fields
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from ...config.defaults import (
    DEFAULT_MODELS,
    STORAGE_KEY_ACTIVE_MODEL,
    STORAGE_KEY_MODELS,
    STORAGE_KEY_PROVIDER_STATUS,
    SYSTEM_DEFAULT_PROVIDER,
)
from ...persistence.interfaces import KeyValueStore
from ..errors import ErrorCode, ModelRegistryError
from ..logging import LogContext, get_logger, log_event
from ..models import (
    ConnectionTestResult,
    ModelCapabilities,
    ModelPricing,
    ModelRecord,
    ProviderDescriptor,
    ProviderStatus,
    rank_active,
)

_MUTABLE_FIELDS = frozenset(
    f.name for f in fields(ModelRecord) if f.name not in ("id", "created_at", "updated_at")
)


class _HasKeys(Protocol):
    def has(self, provider: str) -> bool: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _copy(record: ModelRecord) -> ModelRecord:
    return ModelRecord.from_dict(record.to_dict())


def _coerce(name: str, value: Any) -> Any:
    if name == "capabilities" and isinstance(value, dict):
        return ModelCapabilities.from_dict(value)
    if name == "pricing" and isinstance(value, dict):
        return ModelPricing.from_dict(value)
    return value


class ModelRegistry:
    """Persistent catalog of configured models.

    Parameters
    ----------
    store:
        Backing key-value store.
    seed_defaults:
        When the models slot has never been written, populate it with the
        built-in catalog from ``config.defaults``.
    """

    def __init__(self, store: KeyValueStore, *, seed_defaults: bool = False) -> None:
        self._store = store
        self._seed = seed_defaults
        self._logger = get_logger("registry")
        self._records: List[ModelRecord] = self._load()

    # ---- persistence ----
    def _read_json(self, key: str) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            log_event(self._logger, "registry.corrupt_slot", level=logging.WARNING, key=key)
            return None

    def _load(self) -> List[ModelRecord]:
        data = self._read_json(STORAGE_KEY_MODELS)
        if data is None:
            if self._seed:
                return self._seed_records()
            return []
        records: List[ModelRecord] = []
        for item in data if isinstance(data, list) else []:
            try:
                records.append(ModelRecord.from_dict(item))
            except (KeyError, TypeError, ValueError):
                log_event(self._logger, "registry.skip_invalid_record", level=logging.WARNING, record=item)
        return records

    def _persist(self) -> None:
        self._store.set(STORAGE_KEY_MODELS, json.dumps([r.to_dict() for r in self._records]))

    def _seed_records(self) -> List[ModelRecord]:
        now = _now_ms()
        self._records = [
            ModelRecord.from_dict({**item, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now})
            for item in DEFAULT_MODELS
        ]
        self._persist()
        log_event(self._logger, "registry.seeded", count=len(self._records))
        return self._records

    def seed_defaults(self) -> List[ModelRecord]:
        """Replace the catalog with the built-in default models."""
        return [_copy(r) for r in self._seed_records()]

    def _find(self, record_id: str) -> Optional[ModelRecord]:
        return next((r for r in self._records if r.id == record_id), None)

    # ---- queries ----
    def list(self) -> List[ModelRecord]:
        return [_copy(r) for r in self._records]

    def get(self, record_id: str) -> Optional[ModelRecord]:
        record = self._find(record_id)
        return _copy(record) if record else None

    def by_provider(self, provider_name: str) -> List[ModelRecord]:
        return [_copy(r) for r in self._records if r.provider_name == provider_name]

    def find(self, provider_name: str, model_id: str) -> Optional[ModelRecord]:
        """Return the record configured for this (provider, model id) pair."""
        record = next(
            (r for r in self._records if r.provider_name == provider_name and r.model_id == model_id),
            None,
        )
        return _copy(record) if record else None

    def ranked_active(self) -> List[ModelRecord]:
        """Active records ascending by priority, ties in list order."""
        return [_copy(r) for r in rank_active(self._records)]

    def default_model(self) -> Optional[ModelRecord]:
        """Default active record, else best active system-provider record, else best active."""
        ranked = rank_active(self._records)
        record = next((r for r in ranked if r.is_default), None)
        record = record or next((r for r in ranked if r.provider_name == SYSTEM_DEFAULT_PROVIDER), None)
        record = record or (ranked[0] if ranked else None)
        return _copy(record) if record else None

    # ---- mutations ----
    def add(
        self,
        provider_name: str,
        model_id: str,
        display_name: Optional[str] = None,
        *,
        description: Optional[str] = None,
        priority: Optional[int] = None,
        is_active: bool = True,
        is_default: bool = False,
        capabilities: ModelCapabilities | Dict[str, Any] | None = None,
        pricing: ModelPricing | Dict[str, Any] | None = None,
    ) -> ModelRecord:
        """Append a new record with a generated id and timestamps.

        ``priority`` defaults to one past the current maximum. Duplicate
        detection is the caller's job (see :meth:`find`).
        """
        now = _now_ms()
        if priority is None:
            priority = max((r.priority for r in self._records), default=0) + 1
        record = ModelRecord(
            id=str(uuid.uuid4()),
            provider_name=provider_name,
            model_id=model_id,
            display_name=display_name or model_id,
            description=description,
            priority=priority,
            is_active=is_active,
            is_default=False,
            capabilities=_coerce("capabilities", capabilities) or ModelCapabilities(),
            pricing=_coerce("pricing", pricing),
            created_at=now,
            updated_at=now,
        )
        self._records.append(record)
        if is_default:
            self._mark_default(record.id, now)
        self._persist()
        log_event(self._logger, "registry.added", LogContext(provider=provider_name, model=model_id), id=record.id)
        return _copy(record)

    def update(self, record_id: str, **changes: Any) -> Optional[ModelRecord]:
        """Merge ``changes`` into the record; ``None`` when the id is unknown.

        Raises:
            ModelRegistryError: for fields that cannot be updated.
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ModelRegistryError(
                f"Unknown model fields: {', '.join(sorted(unknown))}", code=ErrorCode.VALIDATION
            )
        record = self._find(record_id)
        if record is None:
            return None
        now = _now_ms()
        make_default = changes.pop("is_default", None)
        for name, value in changes.items():
            setattr(record, name, _coerce(name, value))
        if make_default is True:
            self._mark_default(record_id, now)
        elif make_default is False:
            record.is_default = False
        record.updated_at = now
        self._persist()
        return _copy(record)

    def remove(self, record_id: str) -> bool:
        """Delete the record; clearing a matching active selection is the caller's job."""
        record = self._find(record_id)
        if record is None:
            return False
        self._records.remove(record)
        self._persist()
        log_event(self._logger, "registry.removed", LogContext(provider=record.provider_name, model=record.model_id))
        return True

    def _mark_default(self, record_id: str, now: int) -> None:
        for r in self._records:
            flag = r.id == record_id
            if r.is_default != flag:
                r.is_default = flag
                r.updated_at = now

    def set_default(self, record_id: str) -> bool:
        """Make this record the single application-wide default."""
        if self._find(record_id) is None:
            return False
        self._mark_default(record_id, _now_ms())
        self._persist()
        return True

    def set_active(self, record_id: str, active: bool = True) -> bool:
        record = self._find(record_id)
        if record is None:
            return False
        record.is_active = bool(active)
        record.updated_at = _now_ms()
        self._persist()
        return True

    def reorder(self, ordered_ids: Sequence[str]) -> List[ModelRecord]:
        """Rewrite priorities 1..n in the given order.

        Unknown ids are ignored; records not listed keep their relative order
        after the listed ones.
        """
        by_id = {r.id: r for r in self._records}
        seen: set[str] = set()
        listed: List[ModelRecord] = []
        for rid in ordered_ids:
            if rid in by_id and rid not in seen:
                listed.append(by_id[rid])
                seen.add(rid)
        rest = [r for r in self._records if r.id not in seen]
        now = _now_ms()
        for position, record in enumerate(listed + rest, start=1):
            if record.priority != position:
                record.priority = position
                record.updated_at = now
        self._records = listed + rest
        self._persist()
        return self.list()

    def reset(self) -> List[ModelRecord]:
        """Drop models, active selection and status cache; stored keys stay."""
        self._store.delete(STORAGE_KEY_MODELS)
        self._store.delete(STORAGE_KEY_ACTIVE_MODEL)
        self._store.delete(STORAGE_KEY_PROVIDER_STATUS)
        self._records = []
        if self._seed:
            self._seed_records()
        else:
            self._persist()
        log_event(self._logger, "registry.reset", count=len(self._records))
        return self.list()

    # ---- active selection ----
    def active_model_id(self) -> Optional[str]:
        return self._store.get(STORAGE_KEY_ACTIVE_MODEL) or None

    def set_active_model_id(self, record_id: Optional[str]) -> None:
        if record_id is None:
            self._store.delete(STORAGE_KEY_ACTIVE_MODEL)
        else:
            self._store.set(STORAGE_KEY_ACTIVE_MODEL, record_id)

    # ---- provider status ----
    def _statuses(self) -> Dict[str, Dict[str, Any]]:
        data = self._read_json(STORAGE_KEY_PROVIDER_STATUS)
        return data if isinstance(data, dict) else {}

    def record_test_result(self, provider: str, result: ConnectionTestResult) -> ConnectionTestResult:
        if result.tested_at is None:
            result.tested_at = _now_ms()
        statuses = self._statuses()
        statuses[provider] = result.to_dict()
        self._store.set(STORAGE_KEY_PROVIDER_STATUS, json.dumps(statuses))
        return result

    def last_test_result(self, provider: str) -> Optional[ConnectionTestResult]:
        data = self._statuses().get(provider)
        return ConnectionTestResult.from_dict(data) if isinstance(data, dict) else None

    def provider_statuses(
        self, descriptors: Iterable[ProviderDescriptor], credentials: _HasKeys
    ) -> List[ProviderStatus]:
        """Build the derived status view for each descriptor."""
        statuses = self._statuses()
        out: List[ProviderStatus] = []
        for d in descriptors:
            models = [r for r in self._records if r.provider_name == d.name]
            last = statuses.get(d.name)
            out.append(
                ProviderStatus(
                    name=d.name,
                    display_name=d.display_name,
                    has_key=credentials.has(d.name),
                    has_active_model=any(r.is_active for r in models),
                    model_count=len(models),
                    last_test=ConnectionTestResult.from_dict(last) if isinstance(last, dict) else None,
                )
            )
        return out


__all__ = ["ModelRegistry"]
