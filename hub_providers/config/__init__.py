"""Unified configuration layer.

Sources are merged in a predictable order:
    1. Built-in defaults (``config.defaults``)
    2. Optional external file (JSON or YAML) pointed to by ``HUB_CONFIG_FILE``
    3. ``.env`` file (``DOTENV_FILE``, default ``./.env``), never overriding
       real environment values unless they look like placeholders
    4. Environment variables (``HUB_*``)
    5. In-code overrides passed to :func:`get_settings`

External file example::

    db_path: ~/.hub/providers.db
    fallback:
      max_retries: 1
      retry_delay_ms: 500
    openrouter:
      app_title: My Chat
    providers:
      openai:
        base_url: https://proxy.local/v1
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    DEFAULT_ORIGIN,
    FALLBACK_DEFAULT_ENABLE,
    FALLBACK_DEFAULT_MAX_RETRIES,
    FALLBACK_DEFAULT_RETRY_DELAY_MS,
    OPENROUTER_APP_REFERER,
    OPENROUTER_APP_TITLE,
)
from .env import env_bool, env_int, is_placeholder

_DOTENV_LOADED = False


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        db_path: SQLite file; ``None`` selects the default location.
        origin: Serving origin mixed into the credential key derivation.
        encryption_secret: Optional secret replacing the device id.
        max_retries / retry_delay_ms / enable_fallback: fallback policy seed.
        seed_defaults: Populate the default model catalog on first load.
        import_env_keys: Copy ``<PROVIDER>_API_KEY`` values into the
            credential store when no key is stored yet.
        app_title / app_referer: OpenRouter identity headers.
        base_urls: Per-provider base URL overrides.
    """

    db_path: Optional[str] = None
    origin: str = DEFAULT_ORIGIN
    encryption_secret: Optional[str] = None
    max_retries: int = FALLBACK_DEFAULT_MAX_RETRIES
    retry_delay_ms: int = FALLBACK_DEFAULT_RETRY_DELAY_MS
    enable_fallback: bool = FALLBACK_DEFAULT_ENABLE
    seed_defaults: bool = True
    import_env_keys: bool = True
    app_title: str = OPENROUTER_APP_TITLE
    app_referer: str = OPENROUTER_APP_REFERER
    base_urls: Dict[str, str] = field(default_factory=dict)


def _load_dotenv_once() -> None:
    """Parse ``KEY=VALUE`` lines from the dotenv file once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def load_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the external config file (JSON first, then YAML).

    Returns an empty dict when no file is configured or it does not exist.
    """
    path = path or os.getenv("HUB_CONFIG_FILE")
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _from_file(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in ("db_path", "origin", "encryption_secret", "seed_defaults", "import_env_keys"):
        if key in data:
            out[key] = data[key]
    fallback = data.get("fallback") or {}
    for key in ("max_retries", "retry_delay_ms", "enable_fallback"):
        if key in fallback:
            out[key] = fallback[key]
    openrouter = data.get("openrouter") or {}
    if "app_title" in openrouter:
        out["app_title"] = openrouter["app_title"]
    if "app_referer" in openrouter:
        out["app_referer"] = openrouter["app_referer"]
    providers = data.get("providers") or {}
    urls = {name: cfg["base_url"] for name, cfg in providers.items() if isinstance(cfg, dict) and cfg.get("base_url")}
    if urls:
        out["base_urls"] = urls
    return out


def _from_env(base: Settings) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, env in (
        ("db_path", "HUB_DB_PATH"),
        ("origin", "HUB_ORIGIN"),
        ("encryption_secret", "HUB_ENCRYPTION_SECRET"),
        ("app_title", "HUB_APP_TITLE"),
        ("app_referer", "HUB_APP_REFERER"),
    ):
        val = os.getenv(env)
        if val:
            out[key] = val
    out["max_retries"] = env_int("HUB_MAX_RETRIES", base.max_retries)
    out["retry_delay_ms"] = env_int("HUB_RETRY_DELAY_MS", base.retry_delay_ms)
    out["enable_fallback"] = env_bool("HUB_ENABLE_FALLBACK", base.enable_fallback)
    out["seed_defaults"] = env_bool("HUB_SEED_DEFAULTS", base.seed_defaults)
    out["import_env_keys"] = env_bool("HUB_IMPORT_ENV_KEYS", base.import_env_keys)
    return out


def get_settings(overrides: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> Settings:
    """Return merged :class:`Settings`; unknown override keys are ignored."""
    _load_dotenv_once()
    settings = replace(Settings(), **_from_file(load_config_file(config_file)))
    settings = replace(settings, **_from_env(settings))
    if overrides:
        names = {f.name for f in fields(Settings)}
        settings = replace(settings, **{k: v for k, v in overrides.items() if k in names})
    return settings


__all__ = ["Settings", "get_settings", "load_config_file"]
