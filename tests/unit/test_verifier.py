"""Unit tests for the verifier."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from sensor_fixtures.adapters.outbound import SqliteBindingSession
from sensor_fixtures.application import verifier as verifier_module
from sensor_fixtures.application.index_builder import IndexBuilder
from sensor_fixtures.application.loader import BatchedLoader
from sensor_fixtures.application.verifier import Verifier
from sensor_fixtures.domain.services import RowGenerator
from sensor_fixtures.domain.value_objects import DEMO_QUERIES, INDEX_NAMES, DemoQuery
from sensor_fixtures.infrastructure.metrics import MetricsRegistry


def load(path: Path, rooms: int, logs_per_room: int, metrics: MetricsRegistry) -> None:
    gen = RowGenerator(rooms=rooms, logs_per_room=logs_per_room, seed=21)
    with SqliteBindingSession(path) as session:
        BatchedLoader(session, 100, metrics).load(gen.records())
        IndexBuilder(session, metrics=metrics).build()


def build_indexes(path: Path, metrics: MetricsRegistry) -> None:
    with SqliteBindingSession(path) as session:
        IndexBuilder(session, metrics=metrics).build()


@pytest.mark.unit
class TestVerifier:
    """Tests for Verifier."""

    def test_clean_fixture_passes(self, schema_db: Path, metrics_registry: MetricsRegistry) -> None:
        load(schema_db, 3, 40, metrics_registry)

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(3, 120)

        assert report.ok, report.failures
        assert report.room_count == 3
        assert report.log_count == 120
        assert 10.0 <= report.temperature_min <= report.temperature_max <= 70.0
        assert len(report.demos) == len(DEMO_QUERIES)

    def test_every_range_checked(self, schema_db: Path, metrics_registry: MetricsRegistry) -> None:
        load(schema_db, 1, 5, metrics_registry)

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(1, 5, run_demos=False)

        names = {check.name for check in report.checks}
        assert "range:sensor_logs.co2_ppm" in names
        assert "range:sensor_logs.power_consumption_w" in names
        assert "range:rooms.capacity" in names
        assert report.demos == []

    def test_count_mismatch_reported_not_raised(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        load(schema_db, 2, 10, metrics_registry)

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(5, 50, run_demos=False)

        assert not report.ok
        assert {check.name for check in report.failures} == {"room_count", "log_count"}
        # Data is left as it was
        assert report.room_count == 2

    def test_out_of_range_value_detected(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        load(schema_db, 1, 10, metrics_registry)
        with closing(sqlite3.connect(schema_db)) as conn:
            conn.execute("UPDATE sensor_logs SET temperature_celsius = 95.0 WHERE id = 1")
            conn.commit()

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(1, 10, run_demos=False)

        assert [check.name for check in report.failures] == ["range:sensor_logs.temperature_celsius"]
        assert report.temperature_max == 95.0

    def test_orphan_logs_detected(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        build_indexes(schema_db, metrics_registry)
        with closing(sqlite3.connect(schema_db)) as conn:
            # Foreign keys are off on this connection
            conn.execute(
                "INSERT INTO rooms (id, room_number, building_name, floor_number, room_type, capacity) "
                "VALUES (1, 'N101', 'North Tower', 1, 'Office', 10)"
            )
            conn.execute(
                "INSERT INTO sensor_logs (room_id, timestamp, temperature_celsius, humidity_percent, "
                "pressure_hpa, co2_ppm, light_lux, noise_db, motion_detected, air_quality_index, "
                "occupancy_count, voltage_v, power_consumption_w) "
                "VALUES (7, '2024-05-30 08:15:00', 21.5, 45.0, 1013.2, 650, 300.0, 40.5, 1, 42, "
                "3, 229.91, 812.5)"
            )
            conn.commit()

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(1, 1, run_demos=False)

        assert [check.name for check in report.failures] == ["no_orphan_logs"]

    def test_empty_fixture(self, schema_db: Path, metrics_registry: MetricsRegistry) -> None:
        build_indexes(schema_db, metrics_registry)

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(0, 0)

        assert report.ok, report.failures
        assert report.temperature_min is None
        assert report.temperature_max is None
        assert report.indexed_range_count == 0
        assert all(demo.title for demo in report.demos)


@pytest.mark.unit
class TestCatalog:
    """Tests for the catalog listing and the timed range query."""

    def test_lists_tables_and_every_index(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        load(schema_db, 2, 10, metrics_registry)

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(2, 20, run_demos=False)

        assert report.tables == ["rooms", "sensor_logs"]
        assert sorted(report.indexes) == sorted(INDEX_NAMES)
        catalog = next(check for check in report.checks if check.name == "catalog")
        assert catalog.passed
        assert catalog.detail == "2 tables, 14 indexes"

    def test_missing_indexes_fail_catalog_check(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(0, 0, run_demos=False)

        assert [check.name for check in report.failures] == ["catalog"]
        assert "idx_sensor_logs_temperature" in report.failures[0].detail
        assert report.indexes == []

    def test_indexed_range_query_timed(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        load(schema_db, 2, 50, metrics_registry)
        with closing(sqlite3.connect(schema_db)) as conn:
            expected = conn.execute(
                "SELECT COUNT(*) FROM sensor_logs WHERE temperature_celsius BETWEEN 35.0 AND 45.0"
            ).fetchone()[0]

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(2, 100, run_demos=False)

        assert report.indexed_range_count == expected
        assert report.indexed_range_seconds is not None
        assert report.indexed_range_seconds >= 0.0


@pytest.mark.unit
class TestEngineErrors:
    """Engine errors during verification become failed checks."""

    def test_failing_demo_query_reported(
        self,
        schema_db: Path,
        metrics_registry: MetricsRegistry,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        load(schema_db, 1, 5, metrics_registry)
        broken = DemoQuery("Broken", "SELECT no_such_column FROM sensor_logs")
        monkeypatch.setattr(verifier_module, "DEMO_QUERIES", (broken, *DEMO_QUERIES[:1]))

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(1, 5)

        assert [check.name for check in report.failures] == ["demo:Broken"]
        assert "no such column: no_such_column" in report.failures[0].detail
        # Later demos still run
        assert [demo.title for demo in report.demos] == [DEMO_QUERIES[0].title]

    def test_missing_table_reported_per_check(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        with closing(sqlite3.connect(schema_db)) as conn:
            conn.execute("DROP TABLE sensor_logs")
            conn.commit()

        with SqliteBindingSession(schema_db) as session:
            report = Verifier(session, metrics=metrics_registry).verify(0, 0)

        failed = {check.name: check.detail for check in report.failures}
        assert "no such table: sensor_logs" in failed["log_count"]
        assert "range:sensor_logs.co2_ppm" in failed
        assert "indexed_range_query" in failed
        # Only the rooms-only demo can still run
        assert [demo.title for demo in report.demos] == ["Room summary by building"]
