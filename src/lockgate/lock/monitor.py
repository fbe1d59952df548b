# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Background task that auto-locks the app after inactivity."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .controller import LockController

_logger = logging.getLogger(__name__)


class InactivityMonitor:
    """Periodically ask the lock controller whether the session went stale."""

    def __init__(self, controller: LockController, *, interval: float = 5.0) -> None:
        self.controller = controller
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the monitor loop on the running event loop."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Stop the monitor loop."""

        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def run_once(self) -> bool:
        """Execute a single inactivity check immediately."""

        try:
            return self.controller.check_inactivity()
        except Exception:
            _logger.exception("Inactivity check failed")
            return False

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self.run_once():
                _logger.info("Session locked after %.0fs of inactivity", self.controller.lock_timeout)


__all__ = ["InactivityMonitor"]
