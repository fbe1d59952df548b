# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Helpers for wiring the lock gate into the Android runtime."""
from __future__ import annotations

import logging
from typing import Any, Optional

_logger = logging.getLogger(__name__)


def bind_pause_lock(app: Any, controller: Any) -> None:
    """Relock on pause and re-check inactivity on resume.

    *app* is a Kivy-style application object exposing ``on_pause`` and
    ``on_resume``; *controller* is a :class:`lockgate.lock.LockController`.
    Existing hooks keep running after the lock gate has been notified.
    """

    if app is None:
        return

    previous_pause = getattr(app, "on_pause", None)
    previous_resume = getattr(app, "on_resume", None)

    def _on_pause(*args, **kwargs):
        controller.on_background()
        if callable(previous_pause):
            previous_pause(*args, **kwargs)
        # Returning True keeps the Android activity alive while paused.
        return True

    def _on_resume(*args, **kwargs):
        controller.on_foreground()
        if callable(previous_resume):
            previous_resume(*args, **kwargs)
        return True

    if hasattr(app, "on_pause"):
        app.on_pause = _on_pause  # type: ignore[assignment]
    if hasattr(app, "on_resume"):
        app.on_resume = _on_resume  # type: ignore[assignment]


def read_keystore_key(alias: str) -> Optional[bytes]:
    """Return the raw bytes of the AndroidKeyStore secret key *alias*.

    ``None`` means there is no usable key: a desktop build without pyjnius,
    an unknown alias, or a hardware-backed key that refuses to export.
    """

    try:
        from jnius import autoclass
    except ImportError:
        return None

    try:
        key_store = autoclass("java.security.KeyStore").getInstance("AndroidKeyStore")
        key_store.load(None)
        entry = key_store.getEntry(alias, None)
        encoded = entry.getSecretKey().getEncoded() if entry is not None else None
    except Exception as exc:  # pragma: no cover - device dependent
        _logger.warning("AndroidKeyStore lookup for %s failed: %s", alias, exc)
        return None
    if encoded is None:
        _logger.debug("No exportable AndroidKeyStore key under %s", alias)
        return None
    return bytes(encoded)


__all__ = ["bind_pause_lock", "read_keystore_key"]
