"""Severities and violations produced when rules are evaluated."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Severity(enum.Enum):
    """How serious a violation is: musts, shoulds and coulds map to these."""

    ERROR = 0
    WARNING = 1
    INFO = 2

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CoreViolation:
    """A violation reported by an expectation, before a severity is attached."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Violation:
    """A violation with the severity of the expectation that produced it."""

    message: str
    severity: Severity

    def __str__(self) -> str:
        return f"[{self.severity}] {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-ready mapping of the violation."""
        return {"message": self.message, "severity": str(self.severity)}