"""Fixture Pipeline - the single entry point for a fixture run.

This module wires the stages together:

    validate -> clean -> schema -> load -> indexes -> persist -> verify

The row generator and the loader are connected by a lazy iterator: the
loader pulls records one at a time and only the current batch is held in
memory (the CSV strategy spools to disk instead).

Usage:
    from sensor_fixtures.application import FixturePipeline
    from sensor_fixtures.infrastructure import build_config

    config = build_config("quick", {"fixture": {"target": "quick.db"}})
    result = FixturePipeline(config).run()
    print(result.load.rows_written)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sensor_fixtures.adapters.outbound import open_session
from sensor_fixtures.application.index_builder import IndexBuilder
from sensor_fixtures.application.loader import create_loader
from sensor_fixtures.application.verifier import Verifier
from sensor_fixtures.domain.services import RowGenerator
from sensor_fixtures.domain.value_objects import SensorProfile, schema_script
from sensor_fixtures.infrastructure.config import Config
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.infrastructure.metrics import MetricsRegistry, get_metrics
from sensor_fixtures.infrastructure.tracing import trace_span
from sensor_fixtures.ports.inbound import (
    CheckResult,
    LoadError,
    LoadReport,
    VerificationReport,
)
from sensor_fixtures.ports.outbound import DatabaseSession, EngineError

logger = get_logger(__name__)

# Files SQLite may leave next to a database
SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")


@dataclass
class PipelineResult:
    """Everything a completed run produced."""

    target: Path
    load: LoadReport
    verification: VerificationReport
    index_seconds: float
    reference_time: datetime


class FixturePipeline:
    """Runs one fixture generation against one target file.

    The target is exclusively owned by the run; two pipelines must not
    share a target. There is no resume: a failed run is repeated from a
    clean target.
    """

    def __init__(
        self,
        config: Config,
        metrics: MetricsRegistry | None = None,
        reference_time: datetime | None = None,
        run_demos: bool = True,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Run configuration.
            metrics: Metrics registry. The global one if None.
            reference_time: End of the timestamp window. Now if None.
            run_demos: Also run the demonstration queries on verify.
        """
        self._config = config
        self._metrics = metrics or get_metrics()
        self._reference_time = reference_time
        self._run_demos = run_demos

    @property
    def config(self) -> Config:
        return self._config

    def run(self) -> PipelineResult:
        """Generate, load, index and verify.

        Raises:
            ConfigurationError: Before anything is written, if the
                configuration cannot work.
            LoadError: If the engine rejects a write. What the target holds
                afterwards is described by ``LoadError.partial_state``.
        """
        fixture = self._config.fixture
        loader_config = self._config.loader

        with trace_span(
            "fixture.run",
            {
                "fixture.rooms": fixture.rooms,
                "fixture.logs_per_room": fixture.logs_per_room,
                "fixture.strategy": loader_config.strategy,
                "fixture.backend": loader_config.backend,
            },
        ):
            with trace_span("fixture.validate"):
                profile = self._config.validate_for_run()

            if fixture.clean:
                self.clean(fixture.target)

            generator = RowGenerator(
                rooms=fixture.rooms,
                logs_per_room=fixture.logs_per_room,
                profile=profile,
                seed=fixture.seed,
                reference_time=self._reference_time,
            )
            logger.info(
                "fixture_run_started",
                target=str(fixture.target),
                rooms=fixture.rooms,
                logs_per_room=fixture.logs_per_room,
                strategy=loader_config.strategy,
                backend=loader_config.backend,
                seed=fixture.seed,
            )

            load_report, index_seconds = self._load(generator)

            with trace_span("fixture.verify"):
                verification = self.verify(profile, generator)

        return PipelineResult(
            target=fixture.target,
            load=load_report,
            verification=verification,
            index_seconds=index_seconds,
            reference_time=generator.reference_time,
        )

    @staticmethod
    def clean(target: Path) -> None:
        """Delete the target database and any journal files beside it."""
        for path in (target, *(target.with_name(target.name + s) for s in SIDECAR_SUFFIXES)):
            if path.exists():
                path.unlink()
                logger.debug("removed_existing_file", path=str(path))

    def verify(self, profile: SensorProfile, generator: RowGenerator) -> VerificationReport:
        """Check the target with a fresh durable session.

        Engine errors are reported as failed checks, never raised: by now
        the data is committed.
        """
        try:
            session = self._open(volatile=False)
        except EngineError as e:
            logger.warning("verification_check_failed", check="open_target", detail=str(e))
            return VerificationReport(checks=[CheckResult("open_target", False, str(e))])

        with session:
            verifier = Verifier(session, profile, self._metrics)
            return verifier.verify(
                expected_rooms=generator.room_count,
                expected_logs=generator.expected_log_count,
                run_demos=self._run_demos,
            )

    def _load(self, generator: RowGenerator) -> tuple[LoadReport, float]:
        loader_config = self._config.loader
        strategy = loader_config.load_strategy
        target = self._config.fixture.target

        try:
            session = self._open(volatile=strategy.volatile)
        except EngineError as e:
            raise LoadError(strategy, "the target could not be opened", {}, str(e)) from e

        with session:
            loader = create_loader(strategy, session, loader_config, self._metrics)
            report: LoadReport | None = None
            try:
                with trace_span("fixture.schema"):
                    session.execute_script(schema_script())

                with trace_span("fixture.load", {"fixture.strategy": strategy.value}):
                    report = loader.load(generator.records())
                self._metrics.load_duration_seconds.labels(
                    strategy=strategy.value, backend=loader_config.backend
                ).observe(report.elapsed_seconds)

                with trace_span("fixture.index"):
                    index_seconds = IndexBuilder(session, loader, self._metrics).build()

                if session.volatile:
                    with trace_span("fixture.persist"):
                        session.persist(target)
            except EngineError as e:
                # Failures outside a loader's own write path
                committed = {} if session.volatile or report is None else report.rows_written
                partial_state = (
                    loader.partial_state
                    if session.volatile or report is None
                    else "every row is committed; indexes or statistics are incomplete"
                )
                logger.error("fixture_step_failed", error=str(e))
                raise LoadError(strategy, partial_state, committed, str(e)) from e

        logger.info(
            "fixture_loaded",
            target=str(target),
            rows=report.rows_written,
            load_seconds=round(report.elapsed_seconds, 3),
            index_seconds=round(index_seconds, 3),
        )
        return report, index_seconds

    def _open(self, volatile: bool) -> DatabaseSession:
        loader_config = self._config.loader
        return open_session(
            loader_config.engine_backend,
            self._config.fixture.target,
            volatile=volatile,
            sqlite_binary=loader_config.sqlite_binary,
            fast_pragmas=loader_config.fast_pragmas,
        )
