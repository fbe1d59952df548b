# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Trust anchor configuration for the secure transport.

The actual certificate checks are done by urllib3/OpenSSL. This module only
decides which anchor they check against: a pinned CA bundle, a pinned
certificate fingerprint, or both. Verification can be narrowed but never
switched off.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

_FINGERPRINT_REGEX = re.compile(r"^[0-9a-f]{64}$")


def normalize_fingerprint(value: str) -> str:
    """Return a SHA-256 fingerprint as 64 lowercase hex digits."""

    cleaned = value.replace(":", "").strip().lower()
    if not _FINGERPRINT_REGEX.match(cleaned):
        raise ValueError("certificate pin must be a SHA-256 fingerprint")
    return cleaned


class PinnedHTTPAdapter(HTTPAdapter):
    """HTTPS adapter that only accepts a peer certificate with a known digest."""

    def __init__(self, fingerprint: str, **kwargs) -> None:
        self.fingerprint = normalize_fingerprint(fingerprint)
        kwargs.setdefault("max_retries", 0)
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["assert_fingerprint"] = self.fingerprint
        return super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


@dataclass(frozen=True)
class TrustPolicy:
    """Which trust anchor the transport verifies the server against.

    ``ca_bundle`` replaces the system store with a pinned CA file;
    ``fingerprint`` additionally requires the leaf certificate to match.
    """

    ca_bundle: Optional[str] = None
    fingerprint: Optional[str] = None

    @property
    def verify(self) -> str | bool:
        return self.ca_bundle or True

    def mount(self, session: requests.Session) -> None:
        if self.fingerprint:
            session.mount("https://", PinnedHTTPAdapter(self.fingerprint))
        else:
            session.mount("https://", HTTPAdapter(max_retries=0))


__all__ = ["PinnedHTTPAdapter", "TrustPolicy", "normalize_fingerprint"]
