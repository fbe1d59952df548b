"""Test configuration helpers."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, List, Optional


def _ensure_src_on_path() -> None:
    src = Path(__file__).resolve().parent.parent / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


_ensure_src_on_path()

import pytest

from lockgate.audit import AuditTrail
from lockgate.lock import Argon2Profile
from lockgate.persistence import EncryptedStorage, FileKeyProvider
from lockgate.state import SessionStore

TEST_PROFILE = Argon2Profile("test", time_cost=1, memory_cost_kib=8, parallelism=1)

LOGIN_RESPONSE = {"id": "1", "name": "A", "email": "a@b.com", "token": "t1"}


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubTransport:
    """Scripted stand-in for :class:`lockgate.transport.SecureTransport`.

    Each queued outcome is either a response body or an exception instance.
    If a ``gate`` event is queued alongside, the call waits for it first.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes)
        self.gates: List[Optional[asyncio.Event]] = [None] * len(outcomes)
        self.calls: List[tuple] = []
        self.closed = False

    def queue(self, outcome: Any, gate: Optional[asyncio.Event] = None) -> None:
        self.outcomes.append(outcome)
        self.gates.append(gate)

    async def post(self, endpoint: str, data: Any = None, headers: Any = None) -> Any:
        self.calls.append((endpoint, data))
        outcome = self.outcomes.pop(0)
        gate = self.gates.pop(0)
        if gate is not None:
            await gate.wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


class StubVerifier:
    def __init__(self, secret: str = "1234") -> None:
        self.secret = secret
        self.calls = 0

    async def verify(self, credential: str) -> bool:
        self.calls += 1
        return credential == self.secret


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def audit(tmp_path) -> AuditTrail:
    return AuditTrail(tmp_path / "audit")


@pytest.fixture
def storage(tmp_path) -> EncryptedStorage:
    return EncryptedStorage(tmp_path / "store", FileKeyProvider(tmp_path / "master.key"))
