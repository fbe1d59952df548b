# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Input validation utilities for the login and unlock flows."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PIN_REGEX = re.compile(r"^\d{4,12}$")


@dataclass
class ValidationIssue:
    field: str
    message: str


class ValidationFailure(RuntimeError):
    """Raised when input is rejected before anything leaves the device."""

    def __init__(self, issues: List[ValidationIssue]) -> None:
        super().__init__("; ".join(issue.message for issue in issues))
        self.issues = issues


def validate_email(email: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    normalized = (email or "").strip()
    if not normalized:
        issues.append(ValidationIssue("email", "Введите адрес электронной почты."))
        return issues
    if not EMAIL_REGEX.match(normalized):
        issues.append(ValidationIssue("email", "Некорректный адрес электронной почты."))
    return issues


def validate_password(password: str) -> list[ValidationIssue]:
    if not password:
        return [ValidationIssue("password", "Введите пароль.")]
    return []


def validate_pin(pin: str) -> list[ValidationIssue]:
    if not pin:
        return [ValidationIssue("pin", "Введите PIN-код.")]
    if not PIN_REGEX.match(pin):
        return [ValidationIssue("pin", "PIN-код должен состоять из 4–12 цифр.")]
    return []


def collect_issues(*sources: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    aggregated: list[ValidationIssue] = []
    for source in sources:
        aggregated.extend(source)
    return aggregated


__all__ = [
    "ValidationFailure",
    "ValidationIssue",
    "collect_issues",
    "validate_email",
    "validate_password",
    "validate_pin",
]
