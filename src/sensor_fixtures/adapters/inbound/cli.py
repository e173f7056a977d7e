"""Command-line entry point.

Usage:
    sensor-fixtures --rooms 2 --logs-per-room 1000 --target quick.db
    sensor-fixtures --preset tutorial --target tutorial.db
    python -m sensor_fixtures --strategy csv --backend cli --seed 7

Exit codes:
    0  the fixture was loaded (verification warnings included)
    1  a load step failed; the engine's message is printed
    2  the configuration was rejected before anything was written
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence, TextIO

from sensor_fixtures import __version__
from sensor_fixtures.application import FixturePipeline, PipelineResult
from sensor_fixtures.domain.value_objects.queries import INDEXED_RANGE_TITLE
from sensor_fixtures.infrastructure.config import PRESETS, ConfigurationError, build_config
from sensor_fixtures.infrastructure.logging import get_logger, setup_logging
from sensor_fixtures.infrastructure.metrics import setup_metrics
from sensor_fixtures.infrastructure.tracing import setup_tracing
from sensor_fixtures.ports.inbound import LoadError

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_CONFIG_ERROR = 2

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensor-fixtures",
        description="Generate a synthetic rooms/sensor_logs SQLite fixture",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--rooms", type=int, help="number of rooms N")
    parser.add_argument("--logs-per-room", type=int, help="sensor logs per room M")
    parser.add_argument("--target", type=Path, help="database file to create")
    parser.add_argument(
        "--strategy",
        choices=["row", "batched", "csv", "memory"],
        help="loading strategy",
    )
    parser.add_argument("--backend", choices=["binding", "cli"], help="engine backend")
    parser.add_argument("--batch-size", type=int, help="rows per transaction")
    parser.add_argument("--seed", type=int, help="random seed for a reproducible dataset")
    parser.add_argument("--sqlite-binary", help="sqlite3 shell executable")
    parser.add_argument("--spool-dir", type=Path, help="keep CSV spool files here")
    parser.add_argument("--preset", choices=sorted(PRESETS), help="start from a named preset")
    parser.add_argument(
        "--no-clean",
        dest="clean",
        action="store_false",
        default=None,
        help="refuse to overwrite an existing target",
    )
    parser.add_argument(
        "--fast-pragmas",
        action="store_true",
        default=None,
        help="disable synchronous writes on the target",
    )
    parser.add_argument(
        "--skip-demo",
        action="store_true",
        help="skip the demonstration queries",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument("--log-format", choices=["json", "console"])
    parser.add_argument("--metrics-port", type=int, help="serve Prometheus metrics on this port")
    parser.add_argument("--otel-endpoint", help="OTLP collector endpoint")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, dict[str, Any]]:
    """Collect the flags that were actually given, grouped by section."""
    sections = {
        "fixture": {
            "rooms": args.rooms,
            "logs_per_room": args.logs_per_room,
            "target": args.target,
            "clean": args.clean,
            "seed": args.seed,
        },
        "loader": {
            "strategy": args.strategy,
            "backend": args.backend,
            "batch_size": args.batch_size,
            "sqlite_binary": args.sqlite_binary,
            "spool_dir": args.spool_dir,
            "fast_pragmas": args.fast_pragmas,
        },
        "observability": {
            "log_level": args.log_level,
            "log_format": args.log_format,
            "metrics_port": args.metrics_port,
            "otel_endpoint": args.otel_endpoint,
        },
    }
    return {
        section: {key: value for key, value in values.items() if value is not None}
        for section, values in sections.items()
    }


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def render_summary(result: PipelineResult, out: TextIO) -> None:
    """Write the human-readable verification summary."""
    report = result.verification
    load = result.load

    print(f"Database: {result.target}", file=out)
    print(f"Strategy: {load.strategy.value}", file=out)
    print(f"Rooms written: {load.count('rooms')}", file=out)
    print(f"Sensor logs written: {load.count('sensor_logs')}", file=out)
    print(
        f"Load time: {load.elapsed_seconds:.2f}s, index time: {result.index_seconds:.2f}s",
        file=out,
    )
    print(file=out)
    print("=== Verification ===", file=out)
    print(f"Rooms: {report.room_count}", file=out)
    print(f"Sensor logs: {report.log_count}", file=out)
    print(
        f"Temperature range: {_format_value(report.temperature_min)}°C to "
        f"{_format_value(report.temperature_max)}°C",
        file=out,
    )
    print(f"Tables: {', '.join(report.tables) or 'none'}", file=out)
    print(
        f"Indexes ({len(report.indexes)}): {', '.join(report.indexes) or 'none'}",
        file=out,
    )
    if report.indexed_range_seconds is not None:
        print(
            f"{INDEXED_RANGE_TITLE}: {report.indexed_range_count} readings "
            f"in {report.indexed_range_seconds:.4f}s",
            file=out,
        )
    for check in report.checks:
        status = "ok" if check.passed else "FAILED"
        print(f"  [{status}] {check.name}: {check.detail}", file=out)

    for demo in report.demos:
        print(file=out)
        print(f"--- {demo.title} ---", file=out)
        if not demo.rows:
            print("  (no rows)", file=out)
        for row in demo.rows:
            print("  " + " | ".join(_format_value(value) for value in row), file=out)

    if not report.ok:
        print(file=out)
        print(f"WARNING: {len(report.failures)} verification check(s) failed", file=out)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args.preset, overrides_from_args(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    observability = config.observability
    setup_logging(observability.log_level, observability.log_format)
    if observability.otel_endpoint:
        setup_tracing(observability.otel_service_name, observability.otel_endpoint)
    metrics = setup_metrics(observability.metrics_port) if observability.metrics_port else None

    pipeline = FixturePipeline(config, metrics=metrics, run_demos=not args.skip_demo)
    try:
        result = pipeline.run()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except LoadError as e:
        print(f"Load failed ({e.strategy.value}): {e.engine_message}", file=sys.stderr)
        committed = ", ".join(f"{t}={n}" for t, n in e.committed.items()) or "none"
        print(f"Committed before the failure: {committed}", file=sys.stderr)
        print(f"Target state: {e.partial_state}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    render_summary(result, sys.stdout)
    logger.info("fixture_run_finished", target=str(result.target), ok=result.verification.ok)
    return EXIT_OK
