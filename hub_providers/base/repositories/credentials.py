"""
Credential Store

Purpose
- Durable, obfuscated storage of provider API keys in the shared key-value
  store (one JSON map ``provider -> ciphertext`` under ``ai_api_keys_encrypted``).
- Keys are decrypted only in memory right before use.

Key derivation
- SHA-256 over ``device_id | origin | salt``; the 32-byte digest, urlsafe
  base64 encoded, is the Fernet key. ``device_id`` is a random id persisted
  under ``ai_device_id`` and created lazily on first derivation. A configured
  encryption secret replaces the device id.

Legacy values
- A stored value that does not look like a Fernet token is returned unchanged
  with a warning. This keeps pre-encryption plaintext keys usable; it is a
  migration path and weakens the "always encrypted at rest" guarantee until
  the key is saved again.
- A value that looks like a token but fails to decrypt yields ``""``.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import uuid
from typing import Dict, List, Optional

from cryptography.fernet import Fernet, InvalidToken

from ...config.defaults import (
    CREDENTIAL_SALT,
    DEFAULT_ORIGIN,
    MASK_MIN_LENGTH,
    MASK_PLACEHOLDER,
    STORAGE_KEY_API_KEYS,
    STORAGE_KEY_DEVICE_ID,
)
from ...persistence.interfaces import KeyValueStore
from ..logging import LogContext, get_logger, log_event

FERNET_PREFIX = "gAAAAA"
CIPHERTEXT_MIN_LENGTH = 50


class CredentialStore:
    """Encrypts, persists, decrypts and masks per-provider API keys.

    Parameters
    ----------
    store:
        Backing key-value store shared with the model registry.
    origin:
        Serving origin mixed into the key derivation.
    encryption_secret:
        Optional secret used instead of the persisted device id.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        origin: str = DEFAULT_ORIGIN,
        encryption_secret: Optional[str] = None,
    ) -> None:
        self._store = store
        self._origin = origin
        self._secret = encryption_secret
        self._fernet: Optional[Fernet] = None
        self._logger = get_logger("credentials")

    # ---- key derivation ----
    def _device_id(self) -> str:
        device_id = self._store.get(STORAGE_KEY_DEVICE_ID)
        if not device_id:
            device_id = uuid.uuid4().hex
            self._store.set(STORAGE_KEY_DEVICE_ID, device_id)
        return device_id

    def _cipher(self) -> Fernet:
        if self._fernet is None:
            secret = self._secret or self._device_id()
            material = f"{secret}|{self._origin}|{CREDENTIAL_SALT}".encode("utf-8")
            digest = hashlib.sha256(material).digest()
            self._fernet = Fernet(base64.urlsafe_b64encode(digest))
        return self._fernet

    # ---- primitives ----
    @staticmethod
    def is_encrypted(value: str) -> bool:
        """Whether ``value`` has the shape of a Fernet token."""
        return bool(value) and value.startswith(FERNET_PREFIX) and len(value) > CIPHERTEXT_MIN_LENGTH

    def encrypt(self, plain: str) -> str:
        if not plain:
            return ""
        return self._cipher().encrypt(plain.encode("utf-8")).decode("ascii")

    def decrypt(self, value: str) -> str:
        """Return the plaintext for ``value``; see the module notes for legacy values."""
        if not value:
            return ""
        if not self.is_encrypted(value):
            log_event(self._logger, "credentials.legacy_plaintext", level=logging.WARNING)
            return value
        try:
            return self._cipher().decrypt(value.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError):
            log_event(self._logger, "credentials.decrypt_failed", level=logging.WARNING)
            return ""

    @staticmethod
    def mask(key: str) -> str:
        """Display-safe form: first and last 4 chars, placeholder for short keys."""
        if not key or len(key) < MASK_MIN_LENGTH:
            return MASK_PLACEHOLDER
        return f"{key[:4]}{MASK_PLACEHOLDER}{key[-4:]}"

    # ---- storage ----
    def _load(self) -> Dict[str, str]:
        raw = self._store.get(STORAGE_KEY_API_KEYS)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            log_event(self._logger, "credentials.corrupt_slot", level=logging.WARNING, key=STORAGE_KEY_API_KEYS)
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _persist(self, keys: Dict[str, str]) -> None:
        self._store.set(STORAGE_KEY_API_KEYS, json.dumps(keys, sort_keys=True))

    def save(self, provider: str, key: str) -> None:
        """Encrypt and persist ``key``, replacing any stored value; blank removes."""
        key = (key or "").strip()
        if not key:
            self.remove(provider)
            return
        keys = self._load()
        keys[provider] = self.encrypt(key)
        self._persist(keys)
        log_event(self._logger, "credentials.saved", LogContext(provider=provider))

    def get(self, provider: str) -> str:
        """Decrypted key, or ``""`` when none is stored or decryption fails."""
        return self.decrypt(self._load().get(provider, ""))

    def has(self, provider: str) -> bool:
        return bool(self._load().get(provider))

    def remove(self, provider: str) -> bool:
        keys = self._load()
        if provider not in keys:
            return False
        del keys[provider]
        self._persist(keys)
        log_event(self._logger, "credentials.removed", LogContext(provider=provider))
        return True

    def providers(self) -> List[str]:
        return sorted(p for p, v in self._load().items() if v)


__all__ = ["CredentialStore", "FERNET_PREFIX"]
