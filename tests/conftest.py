"""Pytest configuration and fixtures for sensor_fixtures tests."""

from __future__ import annotations

import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog
from prometheus_client import CollectorRegistry

from sensor_fixtures.domain.value_objects import schema_script
from sensor_fixtures.infrastructure.config import Config, FixtureConfig, LoaderConfig
from sensor_fixtures.infrastructure.metrics import MetricsRegistry


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop any structlog configuration a test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of a database file that does not exist yet."""
    return temp_dir / "fixture.db"


@pytest.fixture
def schema_db(db_path: Path) -> Path:
    """A database file holding the empty rooms/sensor_logs schema."""
    with closing(sqlite3.connect(db_path)) as conn:
        conn.executescript(schema_script())
    return db_path


@pytest.fixture
def test_config(db_path: Path) -> Config:
    """Provide a small, seeded configuration writing into a temp directory."""
    return Config(
        fixture=FixtureConfig(rooms=3, logs_per_room=20, target=db_path, seed=1234),
        loader=LoaderConfig(strategy="batched", backend="binding", batch_size=7),
    )


@pytest.fixture
def reference_time() -> datetime:
    """Fixed end of the timestamp window."""
    return datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def row_count() -> Callable[[Path, str], int]:
    """Count rows with a plain connection, independent of any session."""

    def count(path: Path, table: str) -> int:
        with closing(sqlite3.connect(path)) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    return count


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
