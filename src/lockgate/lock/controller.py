# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Device lock gate: auto-lock, unlock and failed-attempt lockout."""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from lockgate.audit import AuditTrail
from lockgate.auth import AuthController
from lockgate.security.policy import SecurityPolicy
from lockgate.state import Lock, RecordFailedUnlock, SessionStore, Touch, Unlock

from .verifier import UnlockVerifier

_logger = logging.getLogger(__name__)


class UnlockOutcome(str, Enum):
    UNLOCKED = "unlocked"
    REJECTED = "rejected"
    LOCKED_OUT = "locked_out"
    LOGIN_REQUIRED = "login_required"
    NOT_LOCKED = "not_locked"


class LockController:
    """Decide when the app locks and whether an unlock attempt succeeds.

    Reaching ``max_failed_unlocks`` failed attempts is a lockout: the session
    is terminated through :meth:`AuthController.logout` and the gate stays
    locked until a fresh login, whatever credential is offered afterwards.
    """

    def __init__(
        self,
        store: SessionStore,
        auth: AuthController,
        *,
        policy: SecurityPolicy | None = None,
        verifier: UnlockVerifier | None = None,
        audit: AuditTrail | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        policy = policy or SecurityPolicy()
        self.store = store
        self.auth = auth
        self.verifier = verifier
        self.audit = audit
        self.clock = clock
        self.lock_timeout = policy.lock_timeout
        self.max_failed_unlocks = policy.max_failed_unlocks

    @property
    def locked_out(self) -> bool:
        status = self.store.lock_status
        return (
            status.locked
            and not self.store.is_authenticated
            and status.failed_unlock_attempts >= self.max_failed_unlocks
        )

    def is_stale(self, now: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        return now - self.store.lock_status.last_active_at > self.lock_timeout

    def record_activity(self) -> None:
        self.store.dispatch(Touch(self.clock()))

    def lock(self, reason: str = "manual") -> bool:
        """Lock an authenticated, unlocked session; return whether it locked."""

        if not self.store.is_authenticated or self.store.is_locked:
            return False
        self.store.dispatch(Lock(reason))
        _logger.info("Locked (%s)", reason)
        self._audit("lock.locked", {"reason": reason})
        return True

    def check_inactivity(self, now: Optional[float] = None) -> bool:
        if not self.store.is_authenticated or self.store.is_locked:
            return False
        if not self.is_stale(now):
            return False
        return self.lock("inactivity")

    def on_background(self) -> bool:
        return self.lock("background")

    def on_foreground(self) -> bool:
        return self.check_inactivity()

    def enforce_initial_state(self, now: Optional[float] = None) -> bool:
        """Lock a restored session whose last activity is already too old."""

        if not self.store.is_authenticated or self.store.is_locked:
            return False
        if not self.is_stale(now):
            return False
        return self.lock("stale_on_start")

    async def unlock(self, credential: str) -> UnlockOutcome:
        if self.locked_out:
            _logger.warning("Unlock refused: locked out until the next login")
            return UnlockOutcome.LOCKED_OUT
        if not self.store.is_locked:
            return UnlockOutcome.NOT_LOCKED
        if not self.store.is_authenticated:
            return UnlockOutcome.LOGIN_REQUIRED
        if self.verifier is None:
            raise RuntimeError("no unlock verifier configured")

        accepted = await self.verifier.verify(credential)

        # The state may have moved while the credential was being checked.
        if self.locked_out:
            return UnlockOutcome.LOCKED_OUT
        if not self.store.is_locked:
            return UnlockOutcome.NOT_LOCKED
        if not self.store.is_authenticated:
            return UnlockOutcome.LOGIN_REQUIRED

        if accepted:
            self.store.dispatch(Unlock(self.clock()))
            _logger.info("Unlocked")
            self._audit("lock.unlocked", {})
            return UnlockOutcome.UNLOCKED

        user_id = self.store.session.id
        state = self.store.dispatch(RecordFailedUnlock(self.max_failed_unlocks))
        attempts = state.lock.failed_unlock_attempts
        _logger.warning("Unlock attempt rejected (%d/%d)", attempts, self.max_failed_unlocks)
        self._audit(
            "lock.failed_attempt",
            {"attempts": attempts, "threshold": self.max_failed_unlocks},
        )
        if attempts >= self.max_failed_unlocks:
            self.auth.logout()
            _logger.error("Lockout triggered after %d failed unlock attempts", attempts)
            self._audit("lock.lockout", {"user_id": user_id, "attempts": attempts})
            return UnlockOutcome.LOCKED_OUT
        return UnlockOutcome.REJECTED

    def _audit(self, event: str, details: dict) -> None:
        if self.audit is not None:
            self.audit.record(event, details=details)


__all__ = ["LockController", "UnlockOutcome"]
