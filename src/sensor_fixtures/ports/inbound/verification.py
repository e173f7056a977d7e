"""Verification results for a loaded fixture.

Verification is read-only and advisory: a failed check is reported to the
operator, it never rolls back or deletes data that was already committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CheckResult:
    """One sanity check."""

    name: str
    passed: bool
    detail: str


@dataclass(frozen=True)
class DemoResult:
    """Rows returned by one demonstration query."""

    title: str
    sql: str
    rows: list[tuple[Any, ...]]


@dataclass
class VerificationReport:
    """Everything the verifier found."""

    room_count: int = 0
    log_count: int = 0
    temperature_min: float | None = None
    temperature_max: float | None = None
    tables: list[str] = field(default_factory=list)
    indexes: list[str] = field(default_factory=list)
    indexed_range_count: int | None = None
    indexed_range_seconds: float | None = None
    checks: list[CheckResult] = field(default_factory=list)
    demos: list[DemoResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if every check passed."""
        return all(check.passed for check in self.checks)

    @property
    def failures(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.passed]
