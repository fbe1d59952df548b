# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Unlock credential checks."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from lockgate.persistence import EncryptedStorage, StorageError
from lockgate.security.validation import ValidationFailure, validate_pin

_logger = logging.getLogger(__name__)

PIN_KEY = "pin"


class UnlockVerifier(Protocol):
    async def verify(self, credential: str) -> bool:
        ...


@dataclass(frozen=True)
class Argon2Profile:
    name: str
    time_cost: int
    memory_cost_kib: int
    parallelism: int

    def hasher(self) -> PasswordHasher:
        return PasswordHasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost_kib,
            parallelism=self.parallelism,
        )


# Sized for an interactive unlock on phone hardware.
MOBILE_PROFILE = Argon2Profile("mobile", time_cost=2, memory_cost_kib=64 * 1024, parallelism=1)


class PinVerifier:
    """Check a PIN against an Argon2id hash kept in encrypted storage."""

    def __init__(self, storage: EncryptedStorage, *, profile: Argon2Profile = MOBILE_PROFILE) -> None:
        self.storage = storage
        self.profile = profile
        self._hasher = profile.hasher()

    async def has_pin(self) -> bool:
        return await asyncio.to_thread(self.storage.get_item, PIN_KEY) is not None

    async def set_pin(self, pin: str) -> None:
        issues = validate_pin(pin)
        if issues:
            raise ValidationFailure(issues)
        encoded = await asyncio.to_thread(self._hasher.hash, pin)
        await asyncio.to_thread(self.storage.set_item, PIN_KEY, encoded.encode("ascii"))
        _logger.info("Unlock PIN updated")

    async def verify(self, credential: str) -> bool:
        try:
            stored = await asyncio.to_thread(self.storage.get_item, PIN_KEY)
        except StorageError as exc:
            _logger.error("Stored PIN is unreadable: %s", exc)
            return False
        if stored is None:
            _logger.warning("Unlock attempted without a configured PIN")
            return False
        encoded = stored.decode("ascii", errors="replace")
        try:
            await asyncio.to_thread(self._hasher.verify, encoded, credential or "")
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            _logger.error("Stored PIN hash is unusable: %s", exc)
            return False
        if self._hasher.check_needs_rehash(encoded):
            await self.set_pin(credential)
        return True


__all__ = ["Argon2Profile", "MOBILE_PROFILE", "PIN_KEY", "PinVerifier", "UnlockVerifier"]
