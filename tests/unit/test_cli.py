"""Unit tests for the command-line entry point."""

from __future__ import annotations

import io
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path

import pytest

from sensor_fixtures.adapters.inbound import cli
from sensor_fixtures.application import FixturePipeline, PipelineResult
from sensor_fixtures.application import verifier as verifier_module
from sensor_fixtures.domain.value_objects import DemoQuery, LoadStrategy
from sensor_fixtures.ports.inbound import (
    CheckResult,
    DemoResult,
    LoadError,
    LoadReport,
    VerificationReport,
)


@pytest.mark.unit
class TestArguments:
    """Tests for argument parsing."""

    def test_only_given_flags_become_overrides(self) -> None:
        args = cli.build_parser().parse_args(["--rooms", "4", "--strategy", "csv"])

        overrides = cli.overrides_from_args(args)

        assert overrides == {
            "fixture": {"rooms": 4},
            "loader": {"strategy": "csv"},
            "observability": {},
        }

    def test_no_clean_flag(self) -> None:
        args = cli.build_parser().parse_args(["--no-clean"])

        assert cli.overrides_from_args(args)["fixture"] == {"clean": False}

    def test_log_level_case_insensitive(self) -> None:
        args = cli.build_parser().parse_args(["--log-level", "debug"])

        assert args.log_level == "DEBUG"

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--strategy", "parallel"])


@pytest.mark.unit
class TestMain:
    """Tests for main()."""

    def test_successful_run(self, db_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = cli.main(
            [
                "--rooms", "2",
                "--logs-per-room", "25",
                "--target", str(db_path),
                "--strategy", "memory",
                "--seed", "5",
                "--log-level", "WARNING",
            ]
        )

        out = capsys.readouterr().out
        assert code == cli.EXIT_OK
        assert "Rooms: 2" in out
        assert "Sensor logs: 50" in out
        assert "--- Temperature extremes ---" in out
        with closing(sqlite3.connect(db_path)) as conn:
            assert conn.execute("SELECT COUNT(*) FROM sensor_logs").fetchone()[0] == 50

    def test_skip_demo(self, db_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = cli.main(
            ["--rooms", "1", "--logs-per-room", "3", "--target", str(db_path), "--skip-demo"]
        )

        assert code == cli.EXIT_OK
        assert "---" not in capsys.readouterr().out

    def test_failing_verification_query_is_a_warning(
        self,
        db_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        broken = DemoQuery("Broken", "SELECT no_such_column FROM sensor_logs")
        monkeypatch.setattr(verifier_module, "DEMO_QUERIES", (broken,))

        code = cli.main(
            ["--rooms", "1", "--logs-per-room", "4", "--target", str(db_path), "--log-level", "ERROR"]
        )

        out = capsys.readouterr().out
        assert code == cli.EXIT_OK
        assert "[FAILED] demo:Broken: no such column: no_such_column" in out
        assert "WARNING: 1 verification check(s) failed" in out
        with closing(sqlite3.connect(db_path)) as conn:
            assert conn.execute("SELECT COUNT(*) FROM sensor_logs").fetchone()[0] == 4

    def test_invalid_count_is_configuration_error(
        self, db_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = cli.main(["--rooms", "-3", "--target", str(db_path)])

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err
        assert not db_path.exists()

    def test_unwritable_target_is_configuration_error(
        self, temp_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        target = temp_dir / "missing" / "fixture.db"

        code = cli.main(["--rooms", "1", "--target", str(target)])

        assert code == cli.EXIT_CONFIG_ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_load_error_prints_engine_message(
        self,
        db_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        def failing_run(self: FixturePipeline) -> PipelineResult:
            raise LoadError(
                LoadStrategy.BATCHED,
                "batches committed before the failing one are kept",
                {"rooms": 2},
                "UNIQUE constraint failed: rooms.room_number",
            )

        monkeypatch.setattr(cli.FixturePipeline, "run", failing_run)

        code = cli.main(["--target", str(db_path)])

        err = capsys.readouterr().err
        assert code == cli.EXIT_LOAD_ERROR
        assert "UNIQUE constraint failed: rooms.room_number" in err
        assert "rooms=2" in err


@pytest.mark.unit
class TestRenderSummary:
    """Tests for the verification summary."""

    def test_summary_lists_checks_and_warnings(self) -> None:
        report = VerificationReport(
            room_count=2,
            log_count=10,
            temperature_min=10.4,
            temperature_max=69.8,
            tables=["rooms", "sensor_logs"],
            indexes=["idx_rooms_building", "idx_sensor_logs_temperature"],
            indexed_range_count=3,
            indexed_range_seconds=0.0012,
            checks=[
                CheckResult("room_count", True, "expected 2, found 2"),
                CheckResult("log_count", False, "expected 12, found 10"),
            ],
            demos=[DemoResult("Room summary by building", "SELECT 1", [("East Wing", 3)])],
        )
        result = PipelineResult(
            target=Path("fixture.db"),
            load=LoadReport(LoadStrategy.ROW, {"rooms": 2, "sensor_logs": 10}),
            verification=report,
            index_seconds=0.01,
            reference_time=datetime(2024, 6, 1),
        )
        out = io.StringIO()

        cli.render_summary(result, out)

        text = out.getvalue()
        assert "Temperature range: 10.4°C to 69.8°C" in text
        assert "[FAILED] log_count: expected 12, found 10" in text
        assert "Tables: rooms, sensor_logs" in text
        assert "Indexes (2): idx_rooms_building, idx_sensor_logs_temperature" in text
        assert "Indexed range count (35-45°C): 3 readings in 0.0012s" in text
        assert "  East Wing | 3" in text
        assert "WARNING: 1 verification check(s) failed" in text
