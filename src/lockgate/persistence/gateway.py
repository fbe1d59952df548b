# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Bridge between the in-memory store and the encrypted snapshot on disk."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable, Optional, Tuple

from lockgate.audit import AuditTrail
from lockgate.state import PersistedSnapshot, Rehydrate, SessionState, SessionStore

from .storage import EncryptedStorage, StorageError

_logger = logging.getLogger(__name__)

ROOT_KEY = "root"

ErrorCallback = Callable[[StorageError], None]


class PersistenceGateway:
    """Persist every committed state and restore it once at start-up.

    Writes are serialised: one write is in flight at a time and snapshots
    scheduled meanwhile coalesce into the newest one. Each write carries the
    store sequence number it was taken at, and a write older than the last
    one on disk is dropped, so a later state never loses to an earlier one.

    :meth:`await_ready` is the rehydration barrier; it resolves once the
    initial load has finished, whatever its outcome.
    """

    def __init__(
        self,
        storage: EncryptedStorage,
        *,
        key: str = ROOT_KEY,
        audit: AuditTrail | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.audit = audit
        self.on_error = on_error
        self.last_error: Optional[StorageError] = None
        self._ready = asyncio.Event()
        self._write_lock = asyncio.Lock()
        self._written_sequence = -1
        self._pending: Optional[Tuple[int, PersistedSnapshot]] = None
        self._writer: Optional[asyncio.Task] = None
        self._detach: Optional[Callable[[], None]] = None
        self._seeding = False

    # Read path -------------------------------------------------------------------
    async def read(self) -> Optional[PersistedSnapshot]:
        """Return the stored snapshot, ``None`` when absent; raise on damage."""

        raw = await asyncio.to_thread(self.storage.get_item, self.key)
        if raw is None:
            return None
        try:
            return PersistedSnapshot.from_dict(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError) as exc:
            raise StorageError(f"Снимок состояния повреждён: {exc}") from exc

    async def load(self) -> Optional[PersistedSnapshot]:
        """Like :meth:`read`, but unreadable data counts as no prior session."""

        try:
            snapshot = await self.read()
        except StorageError as exc:
            _logger.warning("Persisted state discarded: %s", exc)
            self._audit("persistence.load_failed", {"error": str(exc)})
            return None
        if snapshot is None:
            _logger.info("No persisted state found")
        return snapshot

    async def rehydrate(
        self,
        store: SessionStore,
        *,
        now: float,
        then: Callable[[], None] | None = None,
    ) -> Optional[PersistedSnapshot]:
        """Load once, seed *store* and release the barrier.

        *then* runs after the store has been seeded and before the barrier
        opens, so start-up rules (such as relocking a stale session) are
        applied before anyone can read the state. The seeding commit is not
        persisted; only later transitions overwrite the record.
        """

        try:
            snapshot = await self.load()
            seed = snapshot if snapshot is not None else SessionState.initial(now).snapshot()
            # The seed mirrors the disk, or stands in for a record that could
            # not be read; either way it must not be written back.
            self._seeding = True
            try:
                store.dispatch(Rehydrate(seed))
            finally:
                self._seeding = False
            if then is not None:
                then()
            return snapshot
        finally:
            self._ready.set()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    async def await_ready(self) -> None:
        await self._ready.wait()

    # Write path ------------------------------------------------------------------
    async def save(self, snapshot: PersistedSnapshot, sequence: int | None = None) -> None:
        """Encrypt and write *snapshot*; raise :class:`StorageError` on failure."""

        async with self._write_lock:
            if sequence is not None and sequence <= self._written_sequence:
                _logger.debug("Skipping stale snapshot #%d", sequence)
                return
            payload = json.dumps(snapshot.to_dict(), sort_keys=True).encode("utf-8")
            try:
                await asyncio.to_thread(self.storage.set_item, self.key, payload)
            except StorageError as exc:
                self.last_error = exc
                _logger.error("Persisting state failed: %s", exc)
                self._audit("persistence.write_failed", {"error": str(exc), "sequence": sequence})
                raise
            if sequence is not None:
                self._written_sequence = sequence
            self.last_error = None

    def schedule(self, snapshot: PersistedSnapshot, sequence: int) -> None:
        """Queue *snapshot* for writing without waiting for it."""

        if self._pending is None or sequence > self._pending[0]:
            self._pending = (sequence, snapshot)
        if self._writer is not None and not self._writer.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.warning("No running event loop; snapshot #%d waits for flush()", sequence)
            return
        self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            sequence, snapshot = self._pending
            self._pending = None
            try:
                await self.save(snapshot, sequence)
            except StorageError as exc:
                if self.on_error is not None:
                    self.on_error(exc)

    async def flush(self) -> None:
        """Wait until every scheduled snapshot has been written (or failed)."""

        while True:
            writer = self._writer
            if writer is not None and not writer.done():
                await writer
            elif self._pending is not None:
                self._writer = asyncio.get_running_loop().create_task(self._drain())
            else:
                return

    def attach(self, store: SessionStore) -> None:
        """Persist every state *store* commits from now on."""

        self.detach()

        def _on_commit(state: SessionState, sequence: int) -> None:
            if self._seeding:
                _logger.debug("Not persisting rehydrated state #%d", sequence)
                return
            self.schedule(state.snapshot(), sequence)

        self._detach = store.subscribe(_on_commit)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    async def purge(self) -> None:
        """Delete the persisted record."""

        async with self._write_lock:
            await asyncio.to_thread(self.storage.remove_item, self.key)
        _logger.info("Persisted state removed")

    def _audit(self, event: str, details: dict) -> None:
        if self.audit is not None:
            self.audit.record(event, details=details)


__all__ = ["PersistenceGateway", "ROOT_KEY"]
