# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""LockGate: secure session and device-lock state for the mobile client."""

from __future__ import annotations

from lockgate.auth import AuthController
from lockgate.lock import LockController, UnlockOutcome
from lockgate.persistence import PersistenceGateway, StorageError
from lockgate.runtime import LockGateRuntime
from lockgate.state import SessionStore
from lockgate.transport import (
    NetworkOrProtocolFailure,
    SecureTransport,
    TransportError,
    TrustVerificationFailure,
)

__version__ = "0.1.0"

__all__ = [
    "AuthController",
    "LockController",
    "LockGateRuntime",
    "NetworkOrProtocolFailure",
    "PersistenceGateway",
    "SecureTransport",
    "SessionStore",
    "StorageError",
    "TransportError",
    "TrustVerificationFailure",
    "UnlockOutcome",
]
