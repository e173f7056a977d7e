"""Unit tests for the sqlite3 shell session.

SQL rendering is tested everywhere; tests that drive the shell itself are
skipped when no ``sqlite3`` binary is installed.
"""

from __future__ import annotations

import csv
import shutil
from pathlib import Path
from typing import Callable

import pytest

from sensor_fixtures.adapters.outbound import SqliteShellSession
from sensor_fixtures.adapters.outbound.sqlite_shell_session import (
    _coerce,
    render_copy_from_staging,
    render_insert,
)
from sensor_fixtures.domain.value_objects import ROOMS, SENSOR_LOGS, schema_script
from sensor_fixtures.ports.outbound import EngineError

requires_shell = pytest.mark.skipif(
    shutil.which("sqlite3") is None,
    reason="sqlite3 shell not installed",
)

ROOM_ROWS = [
    (1, "N101", "North Tower", 1, "Office", 10),
    (2, "S205", "South Tower", 2, "Laboratory", 30),
]


def write_csv(path: Path, header: list[str], rows: list[list[object]]) -> Path:
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.mark.unit
class TestRendering:
    """Tests for SQL text rendering."""

    def test_render_insert_single_row(self) -> None:
        sql = render_insert(ROOMS, [ROOM_ROWS[0]])

        assert sql.startswith(
            "INSERT INTO rooms (id, room_number, building_name, floor_number, room_type, capacity)"
        )
        assert "VALUES (1, 'N101', 'North Tower', 1, 'Office', 10)" in sql

    def test_render_insert_multiple_rows(self) -> None:
        sql = render_insert(ROOMS, ROOM_ROWS)

        assert sql.count("'North Tower'") == 1
        assert "(2, 'S205', 'South Tower', 2, 'Laboratory', 30)" in sql

    def test_quotes_are_escaped(self) -> None:
        sql = render_insert(ROOMS, [(1, "N'101", "O'Brien Hall", 1, "Office", 10)])

        assert "'N''101'" in sql
        assert "'O''Brien Hall'" in sql

    def test_null_rendered(self) -> None:
        sql = render_insert(ROOMS, [(1, "N101", "North Tower", 1, "Office", None)])

        assert sql.endswith("NULL)")

    def test_render_copy_from_staging(self) -> None:
        sql = render_copy_from_staging(SENSOR_LOGS, "_staging_sensor_logs", ["room_id", "noise_db"])

        assert sql.startswith("INSERT INTO sensor_logs (room_id, noise_db) SELECT")
        assert sql.endswith("FROM _staging_sensor_logs")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", None), ("42", 42), ("-3", -3), ("23.5", 23.5), ("N101", "N101")],
    )
    def test_coerce(self, text: str, expected: object) -> None:
        assert _coerce(text) == expected

    def test_durable_session_needs_path(self) -> None:
        with pytest.raises(ValueError):
            SqliteShellSession()


@requires_shell
@pytest.mark.unit
class TestSqliteShellSession:
    """Tests that drive the sqlite3 shell."""

    def test_insert_and_query(self, schema_db: Path) -> None:
        with SqliteShellSession(schema_db) as session:
            session.insert_row(ROOMS, ROOM_ROWS[0])
            session.insert_batch(ROOMS, ROOM_ROWS[1:])

            rows = session.query("SELECT id, room_number, capacity FROM rooms ORDER BY id")

        assert rows == [(1, "N101", 10), (2, "S205", 30)]

    def test_failed_batch_rolled_back(
        self, schema_db: Path, row_count: Callable[[Path, str], int]
    ) -> None:
        duplicate = (3, "N101", "North Tower", 1, "Storage", 5)

        with SqliteShellSession(schema_db) as session:
            with pytest.raises(EngineError, match="UNIQUE constraint failed"):
                session.insert_batch(ROOMS, [*ROOM_ROWS, duplicate])

        assert row_count(schema_db, "rooms") == 0

    def test_import_csv(self, schema_db: Path, temp_dir: Path) -> None:
        path = write_csv(temp_dir / "rooms.csv", list(ROOMS.columns), [list(r) for r in ROOM_ROWS])

        with SqliteShellSession(schema_db) as session:
            imported = session.import_csv(ROOMS, path)
            rows = session.query("SELECT id, typeof(capacity) FROM rooms ORDER BY id")

        assert imported == 2
        assert rows == [(1, "integer"), (2, "integer")]

    def test_import_conflict_imports_nothing(
        self, schema_db: Path, temp_dir: Path, row_count: Callable[[Path, str], int]
    ) -> None:
        rows = [list(r) for r in ROOM_ROWS] + [[3, "N101", "North Tower", 1, "Storage", 5]]
        path = write_csv(temp_dir / "rooms.csv", list(ROOMS.columns), rows)

        with SqliteShellSession(schema_db) as session:
            with pytest.raises(EngineError, match="UNIQUE constraint failed"):
                session.import_csv(ROOMS, path)

        assert row_count(schema_db, "rooms") == 0

    def test_ragged_csv_rejected(
        self, schema_db: Path, temp_dir: Path, row_count: Callable[[Path, str], int]
    ) -> None:
        path = write_csv(
            temp_dir / "rooms.csv",
            list(ROOMS.columns),
            [list(ROOM_ROWS[0]), ["2", "S205", "South Tower"]],
        )

        with SqliteShellSession(schema_db) as session:
            with pytest.raises(EngineError, match="expected 6 columns but found 3"):
                session.import_csv(ROOMS, path)

        assert row_count(schema_db, "rooms") == 0

    def test_volatile_persist(
        self, db_path: Path, row_count: Callable[[Path, str], int]
    ) -> None:
        with SqliteShellSession(volatile=True) as session:
            session.execute_script(schema_script())
            session.insert_batch(ROOMS, ROOM_ROWS)
            assert not db_path.exists()

            session.persist(db_path)

        assert row_count(db_path, "rooms") == 2

    def test_volatile_failure_leaves_no_target(self, db_path: Path) -> None:
        duplicate = (3, "N101", "North Tower", 1, "Storage", 5)

        with SqliteShellSession(volatile=True) as session:
            with pytest.raises(EngineError, match="UNIQUE constraint failed"):
                session.execute_script(schema_script())
                session.insert_batch(ROOMS, [*ROOM_ROWS, duplicate])
                session.persist(db_path)

        assert not db_path.exists()

    def test_volatile_session_cannot_query(self) -> None:
        with SqliteShellSession(volatile=True) as session:
            with pytest.raises(EngineError):
                session.query("SELECT 1")

    def test_engine_message_forwarded(self, schema_db: Path) -> None:
        with SqliteShellSession(schema_db) as session:
            with pytest.raises(EngineError, match="no such table: nowhere"):
                session.query("SELECT * FROM nowhere")
