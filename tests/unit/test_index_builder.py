"""Unit tests for the index builder."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from prometheus_client import CollectorRegistry

from sensor_fixtures.adapters.outbound import SqliteBindingSession
from sensor_fixtures.application.index_builder import IndexBuilder
from sensor_fixtures.application.loader import BatchedLoader
from sensor_fixtures.domain.entities import FixtureRecord
from sensor_fixtures.domain.services import RowGenerator
from sensor_fixtures.domain.value_objects import INDEX_STATEMENTS
from sensor_fixtures.infrastructure.metrics import MetricsRegistry


@pytest.mark.unit
class TestIndexBuilder:
    """Tests for IndexBuilder."""

    def test_creates_every_index(self, schema_db: Path, metrics_registry: MetricsRegistry) -> None:
        with SqliteBindingSession(schema_db) as session:
            BatchedLoader(session, 50, metrics_registry).load(
                RowGenerator(rooms=2, logs_per_room=20, seed=1).records()
            )
            IndexBuilder(session, metrics=metrics_registry).build()

            names = {
                row[0]
                for row in session.query(
                    "SELECT name FROM sqlite_master WHERE type = 'index' AND name LIKE 'idx_%'"
                )
            }

        assert len(INDEX_STATEMENTS) == 14
        assert len(names) == 14
        assert "idx_sensor_logs_room_temp" in names

    def test_refreshes_statistics(self, schema_db: Path, metrics_registry: MetricsRegistry) -> None:
        with SqliteBindingSession(schema_db) as session:
            BatchedLoader(session, 50, metrics_registry).load(
                RowGenerator(rooms=2, logs_per_room=20, seed=2).records()
            )
            IndexBuilder(session, metrics=metrics_registry).build()

            stats = session.query("SELECT COUNT(*) FROM sqlite_stat1")

        assert stats[0][0] > 0

    def test_refuses_to_run_during_load(
        self, schema_db: Path, metrics_registry: MetricsRegistry
    ) -> None:
        gen = RowGenerator(rooms=1, logs_per_room=3, seed=3)

        with SqliteBindingSession(schema_db) as session:
            loader = BatchedLoader(session, 10, metrics_registry)
            builder = IndexBuilder(session, loader, metrics_registry)

            def interleaved() -> Iterator[FixtureRecord]:
                for record in gen.records():
                    yield record
                    builder.build()

            with pytest.raises(RuntimeError, match="after the load"):
                loader.load(interleaved())

            assert not loader.in_progress
            builder.build()

    def test_duration_observed(self, schema_db: Path) -> None:
        registry = CollectorRegistry()

        with SqliteBindingSession(schema_db) as session:
            IndexBuilder(session, metrics=MetricsRegistry(registry)).build()

        assert registry.get_sample_value("fixture_index_build_duration_seconds_count") == 1
