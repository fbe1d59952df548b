# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Session and lock state: value types, actions and the store."""

from .actions import (
    Action,
    Clear,
    Fulfilled,
    Lock,
    Logout,
    Pending,
    RecordFailedUnlock,
    Rehydrate,
    Rejected,
    Touch,
    Unlock,
    reduce,
)
from .models import (
    AuthFailure,
    AuthRequestState,
    ErrorKind,
    LockStatus,
    PersistedSnapshot,
    SessionState,
    UserSession,
)
from .store import SessionStore, StoreClosedError

__all__ = [
    "Action",
    "AuthFailure",
    "AuthRequestState",
    "Clear",
    "ErrorKind",
    "Fulfilled",
    "Lock",
    "LockStatus",
    "Logout",
    "Pending",
    "PersistedSnapshot",
    "RecordFailedUnlock",
    "Rehydrate",
    "Rejected",
    "SessionState",
    "SessionStore",
    "StoreClosedError",
    "Touch",
    "Unlock",
    "UserSession",
    "reduce",
]
