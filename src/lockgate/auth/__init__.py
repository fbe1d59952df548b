# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

from .controller import (
    AUTH_ERROR_MESSAGE,
    LOGIN_ENDPOINT,
    SECURITY_ERROR_MESSAGE,
    AuthController,
    LoginTransport,
)

__all__ = [
    "AUTH_ERROR_MESSAGE",
    "AuthController",
    "LOGIN_ENDPOINT",
    "LoginTransport",
    "SECURITY_ERROR_MESSAGE",
]
