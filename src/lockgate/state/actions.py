# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Named state transitions and the pure function that applies them.

Every change to :class:`~lockgate.state.models.SessionState` is expressed as
one of the action types below. :func:`reduce` maps ``(state, action)`` to the
next state without side effects, so any recorded sequence of actions can be
replayed to reproduce a state exactly.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, Type, Union, get_args

from .models import (
    AuthFailure,
    AuthRequestState,
    LockStatus,
    PersistedSnapshot,
    SessionState,
    UserSession,
)


@dataclass(frozen=True)
class Pending:
    """A login request has been sent."""


@dataclass(frozen=True)
class Fulfilled:
    session: UserSession
    at: float


@dataclass(frozen=True)
class Rejected:
    failure: AuthFailure


@dataclass(frozen=True)
class Clear:
    """Dismiss the surfaced login error."""


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class Lock:
    reason: str = "manual"


@dataclass(frozen=True)
class Unlock:
    at: float


@dataclass(frozen=True)
class RecordFailedUnlock:
    threshold: int


@dataclass(frozen=True)
class Touch:
    at: float


@dataclass(frozen=True)
class Rehydrate:
    snapshot: PersistedSnapshot


Action = Union[
    Pending,
    Fulfilled,
    Rejected,
    Clear,
    Logout,
    Lock,
    Unlock,
    RecordFailedUnlock,
    Touch,
    Rehydrate,
]


def _pending(state: SessionState, action: Pending) -> SessionState:
    return replace(state, auth=AuthRequestState(pending=True))


def _fulfilled(state: SessionState, action: Fulfilled) -> SessionState:
    if not action.session.is_authenticated:
        raise ValueError("Fulfilled requires an authenticated session")
    # A successful login is the only reset of a lockout.
    return SessionState(
        session=action.session,
        lock=LockStatus(locked=False, last_active_at=action.at, failed_unlock_attempts=0),
        auth=AuthRequestState(),
    )


def _rejected(state: SessionState, action: Rejected) -> SessionState:
    return replace(state, auth=AuthRequestState(pending=False, error=action.failure))


def _clear(state: SessionState, action: Clear) -> SessionState:
    if state.auth.error is None:
        return state
    return replace(state, auth=replace(state.auth, error=None))


def _logout(state: SessionState, action: Logout) -> SessionState:
    return replace(state, session=UserSession.EMPTY, auth=AuthRequestState())


def _lock(state: SessionState, action: Lock) -> SessionState:
    if state.lock.locked:
        return state
    return replace(state, lock=replace(state.lock, locked=True))


def _unlock(state: SessionState, action: Unlock) -> SessionState:
    # Without a session there is nothing to unlock into; only a login clears it.
    if not state.session.is_authenticated:
        return state
    return replace(
        state,
        lock=LockStatus(locked=False, last_active_at=action.at, failed_unlock_attempts=0),
    )


def _record_failed_unlock(state: SessionState, action: RecordFailedUnlock) -> SessionState:
    attempts = state.lock.failed_unlock_attempts + 1
    lock = replace(state.lock, locked=True, failed_unlock_attempts=attempts)
    if attempts >= action.threshold:
        return replace(state, session=UserSession.EMPTY, lock=lock, auth=AuthRequestState())
    return replace(state, lock=lock)


def _touch(state: SessionState, action: Touch) -> SessionState:
    if state.lock.locked or action.at <= state.lock.last_active_at:
        return state
    return replace(state, lock=replace(state.lock, last_active_at=action.at))


def _rehydrate(state: SessionState, action: Rehydrate) -> SessionState:
    return SessionState(
        session=action.snapshot.session,
        lock=action.snapshot.lock,
        auth=AuthRequestState(),
    )


_HANDLERS: Dict[Type, Callable[[SessionState, object], SessionState]] = {
    Pending: _pending,
    Fulfilled: _fulfilled,
    Rejected: _rejected,
    Clear: _clear,
    Logout: _logout,
    Lock: _lock,
    Unlock: _unlock,
    RecordFailedUnlock: _record_failed_unlock,
    Touch: _touch,
    Rehydrate: _rehydrate,
}

_missing = set(get_args(Action)) ^ set(_HANDLERS)
if _missing:  # pragma: no cover - caught at import time
    raise RuntimeError(f"actions without a transition: {sorted(t.__name__ for t in _missing)}")


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the state that results from applying *action* to *state*."""

    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"unknown action: {action!r}")
    return handler(state, action)


__all__ = [
    "Action",
    "Clear",
    "Fulfilled",
    "Lock",
    "Logout",
    "Pending",
    "RecordFailedUnlock",
    "Rehydrate",
    "Rejected",
    "Touch",
    "Unlock",
    "reduce",
]
