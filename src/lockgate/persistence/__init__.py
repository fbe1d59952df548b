# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Encrypted persistence of the session snapshot."""

from .gateway import ROOT_KEY, PersistenceGateway
from .keys import FileKeyProvider, KeyProvider, KeystoreKeyProvider
from .storage import EncryptedStorage, StorageError

__all__ = [
    "EncryptedStorage",
    "FileKeyProvider",
    "KeyProvider",
    "KeystoreKeyProvider",
    "PersistenceGateway",
    "ROOT_KEY",
    "StorageError",
]
