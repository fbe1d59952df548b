# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Failure taxonomy of the secure transport."""
from __future__ import annotations

from typing import Any, Optional

CERTIFICATE_VALIDATION_MARKER = "Certificate validation failed"


class TransportError(RuntimeError):
    """Base class for every failure raised by :class:`SecureTransport`."""


class TrustVerificationFailure(TransportError):
    """The channel refused to validate the server identity.

    Treated as an active-attack signal: never retried automatically.
    """

    def __init__(self, detail: str = "") -> None:
        message = CERTIFICATE_VALIDATION_MARKER
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NetworkOrProtocolFailure(TransportError):
    """Timeout, connection loss, non-2xx status or malformed body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def is_trust_failure(exc: BaseException) -> bool:
    """Recognise a trust failure by type, or by its fixed marker.

    The marker only counts for errors raised outside the transport; a
    :class:`NetworkOrProtocolFailure` carries server-supplied text and is
    never a trust failure.
    """

    if isinstance(exc, TrustVerificationFailure):
        return True
    if isinstance(exc, NetworkOrProtocolFailure):
        return False
    return CERTIFICATE_VALIDATION_MARKER in str(exc)


__all__ = [
    "CERTIFICATE_VALIDATION_MARKER",
    "NetworkOrProtocolFailure",
    "TransportError",
    "TrustVerificationFailure",
    "is_trust_failure",
]
