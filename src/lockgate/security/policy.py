# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Centralised security policy configuration.

The policy aggregates the tunables shared by the transport, the lock gate and
the persistence layer so that every component reads the same values. Values
can be overridden by environment variables, which lets a build change the
backend or the lock timings without code changes. Malformed values fall back
to the defaults instead of failing the start-up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_API_URL = "https://lock-screen-backend.overflowhosting.tech"


def _load_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _load_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _load_str(name: str, default: Optional[str]) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(frozen=True)
class SecurityPolicy:
    """Holds runtime tunables for the session and lock subsystem."""

    api_base_url: str = DEFAULT_API_URL
    request_timeout: float = 15.0
    lock_timeout: float = 60.0
    max_failed_unlocks: int = 5
    inactivity_poll_interval: float = 5.0
    data_dir: Path = field(default_factory=lambda: Path.home() / ".lockgate")
    ca_bundle: Optional[str] = None
    pinned_fingerprint: Optional[str] = None

    @property
    def audit_dir(self) -> Path:
        override = os.environ.get("LOCKGATE_AUDIT_DIR")
        if override:
            return Path(override).expanduser()
        return self.data_dir / "audit"


def load_policy() -> SecurityPolicy:
    """Load the security policy considering environment overrides."""

    data_dir = _load_str("LOCKGATE_DATA_DIR", None)
    return SecurityPolicy(
        api_base_url=_load_str("LOCKGATE_API_URL", DEFAULT_API_URL) or DEFAULT_API_URL,
        request_timeout=_load_float("LOCKGATE_REQUEST_TIMEOUT", 15.0),
        lock_timeout=_load_float("LOCKGATE_LOCK_TIMEOUT", 60.0),
        max_failed_unlocks=_load_int("LOCKGATE_MAX_FAILED_UNLOCKS", 5),
        inactivity_poll_interval=_load_float("LOCKGATE_POLL_INTERVAL", 5.0),
        data_dir=Path(data_dir).expanduser() if data_dir else Path.home() / ".lockgate",
        ca_bundle=_load_str("LOCKGATE_CA_BUNDLE", None),
        pinned_fingerprint=_load_str("LOCKGATE_PIN_SHA256", None),
    )


__all__ = ["DEFAULT_API_URL", "SecurityPolicy", "load_policy"]
