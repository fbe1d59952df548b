# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Policy, validation and platform hardening helpers."""

from .policy import SecurityPolicy, load_policy
from .validation import ValidationFailure, ValidationIssue

__all__ = ["SecurityPolicy", "ValidationFailure", "ValidationIssue", "load_policy"]
