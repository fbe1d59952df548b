# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Single source of truth for the user session and the lock status."""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, List

from .actions import Action, reduce
from .models import AuthRequestState, LockStatus, SessionState, UserSession

_logger = logging.getLogger(__name__)

Listener = Callable[[SessionState, int], None]


class StoreClosedError(RuntimeError):
    """Raised when an action is dispatched to a closed store."""


class SessionStore:
    """Apply named actions to the session state and notify subscribers.

    Actions are applied one at a time in dispatch order. An action that
    leaves the state unchanged is not committed: the sequence number does not
    move and nobody is notified. Subscribers are called synchronously after
    every commit, in registration order, with the new state and its sequence
    number. Actions dispatched from inside a subscriber are queued and
    applied once the current notification round has finished.
    """

    def __init__(self, initial: SessionState | None = None) -> None:
        self._state = initial or SessionState()
        self._sequence = 0
        self._listeners: List[Listener] = []
        self._queue: Deque[Action] = deque()
        self._draining = False
        self._closed = False
        self._lock = threading.Lock()

    # Selectors -------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> UserSession:
        return self._state.session

    @property
    def lock_status(self) -> LockStatus:
        return self._state.lock

    @property
    def auth_request(self) -> AuthRequestState:
        return self._state.auth

    @property
    def is_authenticated(self) -> bool:
        return self._state.session.is_authenticated

    @property
    def is_locked(self) -> bool:
        return self._state.lock.locked

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def closed(self) -> bool:
        return self._closed

    # Mutation --------------------------------------------------------------------
    def dispatch(self, action: Action) -> SessionState:
        """Apply *action* and return the resulting state."""

        with self._lock:
            if self._closed:
                raise StoreClosedError("store is closed")
            self._queue.append(action)
            if self._draining:
                return self._state
            self._draining = True
        try:
            self._drain()
        except BaseException:
            with self._lock:
                self._draining = False
                dropped = len(self._queue)
                self._queue.clear()
            if dropped:
                _logger.warning("Dropped %d queued action(s) after a failed dispatch", dropped)
            raise
        return self._state

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    self._draining = False
                    return
                action = self._queue.popleft()
                next_state = reduce(self._state, action)
                if next_state == self._state:
                    _logger.debug("%s left the state unchanged", type(action).__name__)
                    continue
                self._state = next_state
                self._sequence += 1
                sequence = self._sequence
                listeners = list(self._listeners)
            _logger.debug("Committed %s as #%d", type(action).__name__, sequence)
            for listener in listeners:
                try:
                    listener(next_state, sequence)
                except Exception:
                    _logger.exception("Store subscriber %r failed", listener)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it."""

        with self._lock:
            if self._closed:
                raise StoreClosedError("store is closed")
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Drop all subscribers and refuse further actions."""

        with self._lock:
            self._closed = True
            self._listeners.clear()
            self._queue.clear()


__all__ = ["Listener", "SessionStore", "StoreClosedError"]
