"""Pytest configuration for the hub_providers test suite.

Every test gets an isolated in-memory store and an environment without real
provider keys or ``HUB_*`` overrides.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from ..base.repositories import CredentialStore, ModelRegistry
from ..config.env import ENV_KEYS
from ..persistence import InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip provider keys and settings overrides from the process environment."""
    for names in ENV_KEYS.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    for name in (
        "HUB_DB_PATH",
        "HUB_ORIGIN",
        "HUB_ENCRYPTION_SECRET",
        "HUB_APP_TITLE",
        "HUB_APP_REFERER",
        "HUB_MAX_RETRIES",
        "HUB_RETRY_DELAY_MS",
        "HUB_ENABLE_FALLBACK",
        "HUB_SEED_DEFAULTS",
        "HUB_IMPORT_ENV_KEYS",
        "HUB_CONFIG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    yield


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def credentials(store: InMemoryKeyValueStore) -> CredentialStore:
    return CredentialStore(store, origin="http://test.local")


@pytest.fixture()
def registry(store: InMemoryKeyValueStore) -> ModelRegistry:
    return ModelRegistry(store)
