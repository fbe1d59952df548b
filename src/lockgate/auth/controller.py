# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Login and logout use cases."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Protocol, Tuple

from lockgate.audit import AuditTrail
from lockgate.security.validation import collect_issues, validate_email, validate_password
from lockgate.state import (
    AuthFailure,
    Clear,
    ErrorKind,
    Fulfilled,
    Logout,
    Pending,
    Rejected,
    SessionStore,
    UserSession,
)
from lockgate.transport import TransportError, is_trust_failure

_logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = "/api/users/login"

SECURITY_ERROR_MESSAGE = (
    "Ошибка безопасности: соединение может быть скомпрометировано. "
    "Не повторяйте вход в этой сети."
)
AUTH_ERROR_MESSAGE = "Не удалось войти. Проверьте данные и попробуйте снова."


class LoginTransport(Protocol):
    async def post(self, endpoint: str, data: Any = None, headers: Any = None) -> Any:
        ...


class AuthController:
    """Drive the login request and feed its outcome into the store.

    The result of :meth:`login` is observed through the store
    (``auth_request`` and ``session``), never returned. Only the most recent
    request may commit its outcome; a slower, older response is dropped.
    """

    def __init__(
        self,
        store: SessionStore,
        transport: LoginTransport,
        *,
        audit: AuditTrail | None = None,
        login_endpoint: str = LOGIN_ENDPOINT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.transport = transport
        self.audit = audit
        self.login_endpoint = login_endpoint
        self.clock = clock
        self._latest_request = 0
        self._in_flight: Optional[Tuple[str, str]] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    async def login(self, email: str, password: str) -> None:
        credentials = ((email or "").strip(), password or "")
        if self._in_flight == credentials:
            _logger.info("Login for the same account already in progress; ignoring")
            return

        self._latest_request += 1
        request_id = self._latest_request
        self.store.dispatch(Pending())

        issues = collect_issues(validate_email(credentials[0]), validate_password(credentials[1]))
        if issues:
            _logger.info("Login rejected locally: %s", ", ".join(issue.field for issue in issues))
            self._reject(request_id, ErrorKind.AUTH, reason="validation")
            return

        self._in_flight = credentials
        try:
            response = await self.transport.post(
                self.login_endpoint,
                {"email": credentials[0], "password": credentials[1]},
            )
            session = UserSession.from_payload(response)
        except TransportError as exc:
            if is_trust_failure(exc):
                _logger.error("Login aborted: server identity could not be verified")
                self._reject(request_id, ErrorKind.SECURITY, reason="trust")
            else:
                _logger.warning("Login failed: %s", exc)
                self._reject(request_id, ErrorKind.AUTH, reason="transport")
            return
        except ValueError as exc:
            _logger.warning("Login response rejected: %s", exc)
            self._reject(request_id, ErrorKind.AUTH, reason="protocol")
            return
        finally:
            if self._in_flight == credentials:
                self._in_flight = None

        if request_id != self._latest_request:
            _logger.info("Dropping stale login response #%d", request_id)
            return
        self.store.dispatch(Fulfilled(session, at=self.clock()))
        _logger.info("Login succeeded for user %s", session.id)
        self._audit("auth.login.success", {"user_id": session.id})

    def _reject(self, request_id: int, kind: ErrorKind, *, reason: str) -> None:
        if request_id != self._latest_request:
            _logger.info("Dropping stale login failure #%d", request_id)
            return
        message = SECURITY_ERROR_MESSAGE if kind is ErrorKind.SECURITY else AUTH_ERROR_MESSAGE
        self.store.dispatch(Rejected(AuthFailure(kind, message)))
        event = "auth.login.security" if kind is ErrorKind.SECURITY else "auth.login.failure"
        self._audit(event, {"reason": reason})

    def logout(self) -> None:
        user_id = self.store.session.id
        # Invalidate any request still on the wire so it cannot log back in.
        self._latest_request += 1
        self._in_flight = None
        self.store.dispatch(Logout())
        self.store.dispatch(Clear())
        _logger.info("Logged out")
        self._audit("auth.logout", {"user_id": user_id})

    def clear_error(self) -> None:
        self.store.dispatch(Clear())

    def _audit(self, event: str, details: dict) -> None:
        if self.audit is not None:
            self.audit.record(event, details=details)


__all__ = [
    "AUTH_ERROR_MESSAGE",
    "AuthController",
    "LOGIN_ENDPOINT",
    "LoginTransport",
    "SECURITY_ERROR_MESSAGE",
]
