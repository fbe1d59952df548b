# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Sources of the master key that protects the persisted state."""
from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import Optional, Protocol

from lockgate.security.android_security import read_keystore_key

_logger = logging.getLogger(__name__)

KEY_LENGTH = 32


class KeyProvider(Protocol):
    def get_key(self) -> bytes:
        ...


class FileKeyProvider:
    """Keep a random 256-bit key in a file readable only by the owner."""

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self.path = Path(path).expanduser()
        self._key: Optional[bytes] = None

    def get_key(self) -> bytes:
        if self._key is not None:
            return self._key
        if self.path.exists():
            key = self.path.read_bytes()
            if len(key) != KEY_LENGTH:
                raise ValueError(f"master key at {self.path} has an unexpected length")
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            key = secrets.token_bytes(KEY_LENGTH)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as handle:
                handle.write(key)
            _logger.info("Generated a new storage master key at %s", self.path)
        self._key = key
        return key


class KeystoreKeyProvider:
    """Prefer a key held by the Android KeyStore, otherwise use *fallback*."""

    def __init__(self, alias: str, fallback: KeyProvider) -> None:
        self.alias = alias
        self.fallback = fallback

    def get_key(self) -> bytes:
        secret = read_keystore_key(self.alias)
        if secret is not None and len(secret) == KEY_LENGTH:
            return secret
        if secret is not None:
            _logger.warning("Keystore key %s is not 256-bit; using the fallback key", self.alias)
        return self.fallback.get_key()


__all__ = ["FileKeyProvider", "KEY_LENGTH", "KeyProvider", "KeystoreKeyProvider"]
