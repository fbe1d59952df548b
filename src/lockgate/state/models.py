# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Immutable value types for the session and lock state."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional

SNAPSHOT_VERSION = 1


class ErrorKind(str, Enum):
    """Login failure categories rendered differently by the UI."""

    SECURITY = "security"
    AUTH = "auth"


@dataclass(frozen=True)
class AuthFailure:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class UserSession:
    """Authenticated user identity; either fully populated or fully empty."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    token: Optional[str] = None

    EMPTY: ClassVar["UserSession"]

    def __post_init__(self) -> None:
        values = (self.id, self.name, self.email, self.token)
        present = [value is not None for value in values]
        if any(present) and not all(present):
            raise ValueError("UserSession must be either fully populated or empty")

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserSession":
        """Build a session from the login response body.

        The backend spells the identifier ``_id``; ``id`` is accepted too.
        Raises :class:`ValueError` when any field is missing or empty.
        """

        if not isinstance(payload, Mapping):
            raise ValueError("login response is not an object")
        raw_id = payload.get("id", payload.get("_id"))
        fields = {
            "id": raw_id,
            "name": payload.get("name"),
            "email": payload.get("email"),
            "token": payload.get("token"),
        }
        missing = [name for name, value in fields.items() if value is None or value == ""]
        if missing:
            raise ValueError(f"login response is missing: {', '.join(missing)}")
        return cls(**{name: str(value) for name, value in fields.items()})

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"id": self.id, "name": self.name, "email": self.email, "token": self.token}

    def __repr__(self) -> str:
        # Never leak the credential into logs or tracebacks.
        token = "***" if self.token is not None else None
        return f"UserSession(id={self.id!r}, name={self.name!r}, email={self.email!r}, token={token!r})"


UserSession.EMPTY = UserSession()


@dataclass(frozen=True)
class LockStatus:
    locked: bool = False
    last_active_at: float = 0.0
    failed_unlock_attempts: int = 0

    def __post_init__(self) -> None:
        if self.failed_unlock_attempts < 0:
            raise ValueError("failed_unlock_attempts must be >= 0")


@dataclass(frozen=True)
class AuthRequestState:
    pending: bool = False
    error: Optional[AuthFailure] = None

    def __post_init__(self) -> None:
        if self.pending and self.error is not None:
            raise ValueError("a pending request cannot carry an error")


@dataclass(frozen=True)
class SessionState:
    """Root state held by :class:`lockgate.state.store.SessionStore`."""

    session: UserSession = UserSession.EMPTY
    lock: LockStatus = field(default_factory=LockStatus)
    auth: AuthRequestState = field(default_factory=AuthRequestState)

    @classmethod
    def initial(cls, now: float) -> "SessionState":
        return cls(lock=LockStatus(locked=False, last_active_at=now))

    def snapshot(self) -> "PersistedSnapshot":
        return PersistedSnapshot(session=self.session, lock=self.lock)


@dataclass(frozen=True)
class PersistedSnapshot:
    """The part of :class:`SessionState` that survives a restart."""

    session: UserSession
    lock: LockStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "session": self.session.to_dict(),
            "lock": {
                "locked": self.lock.locked,
                "last_active_at": self.lock.last_active_at,
                "failed_unlock_attempts": self.lock.failed_unlock_attempts,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersistedSnapshot":
        if not isinstance(data, Mapping) or data.get("version") != SNAPSHOT_VERSION:
            raise ValueError("unsupported snapshot version")
        session_data = data.get("session")
        lock_data = data.get("lock")
        if not isinstance(session_data, Mapping) or not isinstance(lock_data, Mapping):
            raise ValueError("snapshot is missing session or lock data")
        values = [session_data.get(name) for name in ("id", "name", "email", "token")]
        if any(value is not None and not isinstance(value, str) for value in values):
            raise ValueError("session fields must be strings")
        session = UserSession(*values)
        locked = lock_data.get("locked")
        last_active_at = lock_data.get("last_active_at")
        attempts = lock_data.get("failed_unlock_attempts")
        if not isinstance(locked, bool):
            raise ValueError("lock.locked must be a boolean")
        if isinstance(last_active_at, bool) or not isinstance(last_active_at, (int, float)):
            raise ValueError("lock.last_active_at must be a number")
        if isinstance(attempts, bool) or not isinstance(attempts, int):
            raise ValueError("lock.failed_unlock_attempts must be an integer")
        return cls(
            session=session,
            lock=LockStatus(
                locked=locked,
                last_active_at=float(last_active_at),
                failed_unlock_attempts=attempts,
            ),
        )


__all__ = [
    "AuthFailure",
    "AuthRequestState",
    "ErrorKind",
    "LockStatus",
    "PersistedSnapshot",
    "SNAPSHOT_VERSION",
    "SessionState",
    "UserSession",
]
