# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""HTTP client that only talks to the backend over a trust-verified channel."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from .errors import NetworkOrProtocolFailure, TrustVerificationFailure
from .pinning import TrustPolicy

_logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _require_https(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme != "https" or not parts.netloc:
        raise ValueError(f"base URL must be an https:// URL, got {url!r}")
    return url.rstrip("/")


class SecureTransport:
    """Issue JSON requests against a configurable base URL.

    Failures are raised as one of two kinds: :class:`TrustVerificationFailure`
    when the TLS layer rejected the server identity, and
    :class:`NetworkOrProtocolFailure` for everything else. Nothing is retried
    here; a trust failure must never be silently repeated against a possibly
    hostile endpoint.
    """

    def __init__(
        self,
        base_url: str,
        *,
        default_headers: Mapping[str, str] | None = None,
        timeout: float = 15.0,
        trust: TrustPolicy | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = _require_https(base_url)
        self._default_headers: Dict[str, str] = dict(DEFAULT_HEADERS)
        if default_headers:
            self._default_headers.update(default_headers)
        self.timeout = timeout
        self.trust = trust or TrustPolicy()
        self._session = session or requests.Session()
        if session is None:
            self.trust.mount(self._session)
        _logger.info("Secure transport initialised for %s", self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_headers(self) -> Dict[str, str]:
        return dict(self._default_headers)

    def set_base_url(self, base_url: str) -> None:
        self._base_url = _require_https(base_url)
        _logger.info("Base URL updated to %s", self._base_url)

    def set_default_header(self, key: str, value: str) -> None:
        self._default_headers[key] = value
        _logger.debug("Default header set: %s", key)

    def remove_default_header(self, key: str) -> None:
        self._default_headers.pop(key, None)
        _logger.debug("Default header removed: %s", key)

    def build_url(self, endpoint: str) -> str:
        if not endpoint:
            return self._base_url
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def _merge_headers(self, headers: Mapping[str, str] | None) -> CaseInsensitiveDict:
        merged = CaseInsensitiveDict(self._default_headers)
        if headers:
            merged.update(headers)
        return merged

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        """Send a request and return the parsed response body."""

        url = self.build_url(endpoint)
        method = method.upper()
        data = json.dumps(body).encode("utf-8") if body is not None else None
        merged = self._merge_headers(headers)
        _logger.debug("Making request: %s %s", method, url)
        response = await asyncio.to_thread(self._send, method, url, merged, data)
        _logger.info("Response received: %s %s -> %s", method, url, response.status_code)
        success = 200 <= response.status_code < 300
        try:
            payload = self.parse_response(response)
        except NetworkOrProtocolFailure:
            if success:
                raise
            payload = None
        if not success:
            raise NetworkOrProtocolFailure(
                f"HTTP {response.status_code}: {response.reason or ''}".strip(),
                status_code=response.status_code,
                payload=payload,
            )
        return payload

    def _send(
        self,
        method: str,
        url: str,
        headers: CaseInsensitiveDict,
        data: Optional[bytes],
    ) -> requests.Response:
        try:
            return self._session.request(
                method,
                url,
                headers=dict(headers),
                data=data,
                timeout=self.timeout,
                verify=self.trust.verify,
                allow_redirects=False,
            )
        except requests.exceptions.SSLError as exc:
            _logger.error("Trust verification failed for %s %s", method, url)
            raise TrustVerificationFailure(str(exc)) from exc
        except requests.exceptions.Timeout as exc:
            _logger.warning("Request timed out: %s %s", method, url)
            raise NetworkOrProtocolFailure(f"Request timed out: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            _logger.warning("Request failed: %s %s (%s)", method, url, type(exc).__name__)
            raise NetworkOrProtocolFailure(f"Request failed: {exc}") from exc

    @staticmethod
    def parse_response(response: requests.Response) -> Any:
        """Decode JSON bodies by content type; return anything else as text."""

        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type.lower():
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise NetworkOrProtocolFailure(
                    "Malformed JSON response",
                    status_code=response.status_code,
                ) from exc
        return response.text

    async def get(self, endpoint: str, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, method="GET", headers=headers)

    async def post(
        self,
        endpoint: str,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return await self.request(endpoint, method="POST", headers=headers, body={} if data is None else data)

    async def put(
        self,
        endpoint: str,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return await self.request(endpoint, method="PUT", headers=headers, body={} if data is None else data)

    async def delete(self, endpoint: str, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, method="DELETE", headers=headers)

    def close(self) -> None:
        self._session.close()


__all__ = ["DEFAULT_HEADERS", "SecureTransport"]
