# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

from .logger import AuditTrail

__all__ = ["AuditTrail"]
