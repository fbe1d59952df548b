# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Encrypted key/value records on durable storage."""
from __future__ import annotations

import os
import re
import struct
import tempfile
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .keys import KeyProvider

MAGIC = b"LGR1"
VERSION = 1
HEADER_STRUCT = struct.Struct("!4sB")
NONCE_SIZE = 12
_KEY_REGEX = re.compile(r"^[a-z0-9_-]{1,64}$")


class StorageError(RuntimeError):
    """Raised when a record cannot be encrypted, written, read or decrypted."""


class EncryptedStorage:
    """Store each record as an AES-256-GCM sealed file.

    A record is ``header || nonce || ciphertext+tag``. The header and the
    record key are bound as associated data, so a file renamed to another key
    or re-labelled with another version fails authentication.
    """

    def __init__(self, directory: os.PathLike[str] | str, key_provider: KeyProvider) -> None:
        self.directory = Path(directory).expanduser()
        self.key_provider = key_provider

    def _path_for(self, key: str) -> Path:
        if not _KEY_REGEX.match(key):
            raise ValueError(f"invalid record key {key!r}")
        return self.directory / f"{key}.rec"

    def _cipher(self) -> AESGCM:
        try:
            return AESGCM(self.key_provider.get_key())
        except (OSError, ValueError) as exc:
            raise StorageError(f"Хранилище недоступно: {exc}") from exc

    def get_item(self, key: str) -> Optional[bytes]:
        """Return the decrypted record or ``None`` when it does not exist."""

        path = self._path_for(key)
        try:
            blob = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Не удалось прочитать запись {key!r}: {exc}") from exc

        minimum = HEADER_STRUCT.size + NONCE_SIZE + 16
        if len(blob) < minimum:
            raise StorageError(f"Запись {key!r} повреждена: данные усечены")
        header = blob[: HEADER_STRUCT.size]
        magic, version = HEADER_STRUCT.unpack(header)
        if magic != MAGIC:
            raise StorageError(f"Запись {key!r} имеет неизвестный формат")
        if version != VERSION:
            raise StorageError(f"Запись {key!r} имеет неподдерживаемую версию")
        nonce = blob[HEADER_STRUCT.size : HEADER_STRUCT.size + NONCE_SIZE]
        ciphertext = blob[HEADER_STRUCT.size + NONCE_SIZE :]
        try:
            return self._cipher().decrypt(nonce, ciphertext, header + key.encode("utf-8"))
        except InvalidTag as exc:
            raise StorageError(f"Запись {key!r} повреждена: тег недействителен") from exc

    def set_item(self, key: str, value: bytes) -> None:
        """Encrypt *value* and atomically replace the record."""

        path = self._path_for(key)
        header = HEADER_STRUCT.pack(MAGIC, VERSION)
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._cipher().encrypt(nonce, value, header + key.encode("utf-8"))

        tmp_file = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile("wb", dir=self.directory, delete=False) as tmp:
                tmp_file = tmp.name
                tmp.write(header)
                tmp.write(nonce)
                tmp.write(sealed)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_file, path)
        except OSError as exc:
            if tmp_file and os.path.exists(tmp_file):
                try:
                    os.unlink(tmp_file)
                except OSError:
                    pass
            raise StorageError(f"Не удалось записать запись {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Не удалось удалить запись {key!r}: {exc}") from exc


__all__ = ["EncryptedStorage", "MAGIC", "StorageError", "VERSION"]
