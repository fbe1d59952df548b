# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Lock gate: controller, unlock verification and the inactivity monitor."""

from .controller import LockController, UnlockOutcome
from .monitor import InactivityMonitor
from .verifier import MOBILE_PROFILE, Argon2Profile, PinVerifier, UnlockVerifier

__all__ = [
    "Argon2Profile",
    "InactivityMonitor",
    "LockController",
    "MOBILE_PROFILE",
    "PinVerifier",
    "UnlockOutcome",
    "UnlockVerifier",
]
