"""Read-only sanity checks and demonstration queries.

The verifier only ever issues SELECT statements. A failed check is logged
as a warning and returned in the report; the data already committed is
left exactly as it is. That includes checks the engine could not run at
all: the engine's message becomes the detail of a failed check instead of
an exception.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from sensor_fixtures.domain.value_objects import (
    DEMO_QUERIES,
    INDEX_NAMES,
    ROOMS,
    SENSOR_LOGS,
    TABLES,
    FloatRange,
    IntRange,
    SensorProfile,
)
from sensor_fixtures.domain.value_objects.queries import (
    CATALOG_SQL,
    DUPLICATE_ROOM_NUMBERS_SQL,
    INDEXED_RANGE_SQL,
    LOG_COUNT_SQL,
    ORPHAN_LOGS_SQL,
    ROOM_COUNT_SQL,
    TEMPERATURE_EXTREMES_SQL,
    column_bounds_sql,
)
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.infrastructure.metrics import MetricsRegistry, get_metrics
from sensor_fixtures.ports.inbound import CheckResult, DemoResult, VerificationReport
from sensor_fixtures.ports.outbound import DatabaseSession, EngineError

logger = get_logger(__name__)

# Room columns with a configured range, besides the sensor_logs ones
ROOM_RANGE_FIELDS = ("floor_number", "capacity")

Outcome = tuple[bool, str]


class Verifier:
    """Checks a loaded fixture against what was requested."""

    def __init__(
        self,
        session: DatabaseSession,
        profile: SensorProfile | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._session = session
        self._profile = profile or SensorProfile()
        self._metrics = metrics or get_metrics()

    def verify(
        self,
        expected_rooms: int,
        expected_logs: int,
        run_demos: bool = True,
    ) -> VerificationReport:
        """Run every check, and the demonstration queries if asked.

        Never raises for engine errors; each one is reported as a failed
        check carrying the engine's message.
        """
        report = VerificationReport()

        self._run(report, "catalog", lambda: self._check_catalog(report))
        self._run(
            report,
            "room_count",
            lambda: self._check_count(report, "room_count", ROOM_COUNT_SQL, expected_rooms),
        )
        self._run(
            report,
            "log_count",
            lambda: self._check_count(report, "log_count", LOG_COUNT_SQL, expected_logs),
        )
        self._run(report, "no_orphan_logs", self._check_orphans)
        self._run(report, "unique_room_numbers", self._check_unique_room_numbers)

        bounds = [(ROOMS.name, c, getattr(self._profile, c)) for c in ROOM_RANGE_FIELDS]
        bounds += [
            (SENSOR_LOGS.name, c, self._profile.range_for(c))
            for c in self._profile.numeric_log_fields
        ]
        for table, column, expected in bounds:
            self._run(
                report,
                f"range:{table}.{column}",
                lambda t=table, c=column, e=expected: self._check_bounds(t, c, e),
            )

        self._run(report, "temperature_extremes", lambda: self._read_extremes(report))
        self._run(report, "indexed_range_query", lambda: self._time_indexed_range(report))

        if run_demos:
            for demo in DEMO_QUERIES:
                try:
                    rows = self._session.query(demo.sql)
                except EngineError as e:
                    self._record(report, f"demo:{demo.title}", False, str(e))
                    continue
                report.demos.append(DemoResult(demo.title, demo.sql, rows))

        if report.ok:
            logger.info(
                "verification_passed",
                rooms=report.room_count,
                logs=report.log_count,
                checks=len(report.checks),
            )
        return report

    def _scalar(self, sql: str) -> Any:
        rows = self._session.query(sql)
        return rows[0][0] if rows else None

    def _check_catalog(self, report: VerificationReport) -> Outcome:
        for kind, name in self._session.query(CATALOG_SQL):
            (report.tables if kind == "table" else report.indexes).append(name)

        missing = [t.name for t in TABLES if t.name not in report.tables]
        missing += [name for name in INDEX_NAMES if name not in report.indexes]
        if missing:
            return False, f"missing: {', '.join(missing)}"
        return True, f"{len(report.tables)} tables, {len(report.indexes)} indexes"

    def _check_count(
        self, report: VerificationReport, attribute: str, sql: str, expected: int
    ) -> Outcome:
        found = self._scalar(sql)
        setattr(report, attribute, found)
        return found == expected, f"expected {expected}, found {found}"

    def _check_orphans(self) -> Outcome:
        orphans = self._scalar(ORPHAN_LOGS_SQL)
        return orphans == 0, f"{orphans} orphan logs"

    def _check_unique_room_numbers(self) -> Outcome:
        duplicates = self._scalar(DUPLICATE_ROOM_NUMBERS_SQL) or 0
        return duplicates == 0, f"{duplicates} duplicate room numbers"

    def _check_bounds(self, table: str, column: str, expected: IntRange | FloatRange) -> Outcome:
        low, high = self._session.query(column_bounds_sql(table, column))[0]
        if low is None and high is None:
            return True, "no rows"
        passed = expected.contains(low) and expected.contains(high)
        return passed, f"observed [{low}, {high}], allowed {expected}"

    def _read_extremes(self, report: VerificationReport) -> Outcome:
        report.temperature_min, report.temperature_max = self._session.query(
            TEMPERATURE_EXTREMES_SQL
        )[0]
        return True, f"[{report.temperature_min}, {report.temperature_max}]"

    def _time_indexed_range(self, report: VerificationReport) -> Outcome:
        # Timed as seen through the backend, process startup included for the shell
        started = time.perf_counter()
        count = self._scalar(INDEXED_RANGE_SQL)
        report.indexed_range_seconds = time.perf_counter() - started
        report.indexed_range_count = count
        return True, f"{count} readings in {report.indexed_range_seconds:.4f}s"

    def _run(self, report: VerificationReport, name: str, check: Callable[[], Outcome]) -> None:
        try:
            passed, detail = check()
        except EngineError as e:
            passed, detail = False, str(e)
        self._record(report, name, passed, detail)

    def _record(self, report: VerificationReport, name: str, passed: bool, detail: str) -> None:
        report.checks.append(CheckResult(name, passed, detail))
        self._metrics.verification_checks_total.labels(
            check=name, result="passed" if passed else "failed"
        ).inc()
        if not passed:
            logger.warning("verification_check_failed", check=name, detail=detail)
