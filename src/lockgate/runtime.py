# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Assembly and lifecycle of the session subsystem."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from lockgate.audit import AuditTrail
from lockgate.auth import AuthController
from lockgate.lock import InactivityMonitor, LockController, PinVerifier, UnlockVerifier
from lockgate.persistence import (
    EncryptedStorage,
    FileKeyProvider,
    KeystoreKeyProvider,
    PersistenceGateway,
)
from lockgate.security.policy import SecurityPolicy, load_policy
from lockgate.state import SessionStore
from lockgate.transport import SecureTransport, TrustPolicy

_logger = logging.getLogger(__name__)

KEYSTORE_ALIAS = "lockgate_master"


class LockGateRuntime:
    """Own every component for the lifetime of the process.

    Nothing here is a module-level global: the UI receives the runtime (or
    its store and controllers) explicitly. Use it as an async context manager
    or call :meth:`start` and :meth:`close` yourself.
    """

    def __init__(
        self,
        *,
        policy: SecurityPolicy,
        store: SessionStore,
        transport: SecureTransport,
        storage: EncryptedStorage,
        gateway: PersistenceGateway,
        auth: AuthController,
        lock: LockController,
        monitor: InactivityMonitor,
        verifier: Optional[UnlockVerifier] = None,
        audit: Optional[AuditTrail] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy
        self.store = store
        self.transport = transport
        self.storage = storage
        self.gateway = gateway
        self.auth = auth
        self.lock = lock
        self.monitor = monitor
        self.verifier = verifier
        self.audit = audit
        self.clock = clock
        self._started = False

    @classmethod
    def create(
        cls,
        policy: SecurityPolicy | None = None,
        *,
        transport: SecureTransport | None = None,
        verifier: UnlockVerifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "LockGateRuntime":
        policy = policy or load_policy()
        audit = AuditTrail(policy.audit_dir)
        key_provider = KeystoreKeyProvider(
            KEYSTORE_ALIAS,
            fallback=FileKeyProvider(policy.data_dir / "master.key"),
        )
        storage = EncryptedStorage(policy.data_dir / "store", key_provider)
        transport = transport or SecureTransport(
            policy.api_base_url,
            timeout=policy.request_timeout,
            trust=TrustPolicy(ca_bundle=policy.ca_bundle, fingerprint=policy.pinned_fingerprint),
        )
        verifier = verifier or PinVerifier(storage)
        store = SessionStore()
        gateway = PersistenceGateway(storage, audit=audit)
        auth = AuthController(store, transport, audit=audit, clock=clock)
        lock = LockController(
            store,
            auth,
            policy=policy,
            verifier=verifier,
            audit=audit,
            clock=clock,
        )
        monitor = InactivityMonitor(lock, interval=policy.inactivity_poll_interval)
        return cls(
            policy=policy,
            store=store,
            transport=transport,
            storage=storage,
            gateway=gateway,
            auth=auth,
            lock=lock,
            monitor=monitor,
            verifier=verifier,
            audit=audit,
            clock=clock,
        )

    async def start(self, *, monitor: bool = True) -> None:
        """Restore the persisted state and start auto-locking."""

        if self._started:
            return
        self.gateway.attach(self.store)
        await self.gateway.rehydrate(
            self.store,
            now=self.clock(),
            then=self.lock.enforce_initial_state,
        )
        if monitor:
            self.monitor.start()
        self._started = True
        _logger.info(
            "Session runtime ready (authenticated=%s, locked=%s)",
            self.store.is_authenticated,
            self.store.is_locked,
        )

    async def close(self) -> None:
        await self.monitor.stop()
        await self.gateway.flush()
        self.gateway.detach()
        self.transport.close()
        self.store.close()
        self._started = False

    async def __aenter__(self) -> "LockGateRuntime":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ["KEYSTORE_ALIAS", "LockGateRuntime"]
