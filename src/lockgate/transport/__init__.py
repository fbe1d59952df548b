# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Trust-verified HTTP access to the backend."""

from .errors import (
    CERTIFICATE_VALIDATION_MARKER,
    NetworkOrProtocolFailure,
    TransportError,
    TrustVerificationFailure,
    is_trust_failure,
)
from .pinning import PinnedHTTPAdapter, TrustPolicy
from .secure import DEFAULT_HEADERS, SecureTransport

__all__ = [
    "CERTIFICATE_VALIDATION_MARKER",
    "DEFAULT_HEADERS",
    "NetworkOrProtocolFailure",
    "PinnedHTTPAdapter",
    "SecureTransport",
    "TransportError",
    "TrustPolicy",
    "TrustVerificationFailure",
    "is_trust_failure",
]
