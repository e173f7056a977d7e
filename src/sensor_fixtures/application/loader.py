"""Loading strategies.

Each loader consumes the record stream produced by the row generator and
writes it through a :class:`DatabaseSession`. The strategies differ only in
where the transaction boundaries fall, and therefore in what a failure
leaves behind:

    ROW       every row before the failing one is durable
    BATCHED   every batch before the failing one is durable, the failing
              batch is rolled back in full
    CSV       tables imported before the failing one are durable, the
              failing table is empty
    MEMORY    nothing reaches the target; it stays absent

Loaders never retry. A failure is raised as :class:`LoadError` carrying the
strategy's guarantee, the per-table counts committed so far and the
engine's message unchanged.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

from sensor_fixtures.adapters.outbound.csv_spool import CsvSpool
from sensor_fixtures.domain.entities import FixtureRecord
from sensor_fixtures.domain.value_objects import LoadStrategy, TableSpec
from sensor_fixtures.infrastructure.config import LoaderConfig
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.infrastructure.metrics import MetricsRegistry, get_metrics
from sensor_fixtures.ports.inbound import LoadError, LoadReport
from sensor_fixtures.ports.outbound import DatabaseSession, EngineError

logger = get_logger(__name__)


class _Loader(ABC):
    """Shared bookkeeping for all strategies."""

    strategy: LoadStrategy
    partial_state: str

    def __init__(
        self,
        session: DatabaseSession,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._session = session
        self._metrics = metrics or get_metrics()
        self._committed: dict[str, int] = {}
        self._batches = 0
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def load(self, records: Iterable[FixtureRecord]) -> LoadReport:
        if self._in_progress:
            raise RuntimeError(f"{self.strategy.value} load already in progress")

        self._committed = {}
        self._batches = 0
        self._in_progress = True
        started = time.perf_counter()
        logger.info("load_started", strategy=self.strategy.value)
        try:
            self._load(records)
        finally:
            self._in_progress = False

        report = LoadReport(
            strategy=self.strategy,
            rows_written=dict(self._committed),
            batches_committed=self._batches,
            elapsed_seconds=time.perf_counter() - started,
        )
        logger.info(
            "load_completed",
            strategy=self.strategy.value,
            rows=report.rows_written,
            batches=report.batches_committed,
            elapsed_seconds=round(report.elapsed_seconds, 3),
        )
        return report

    @abstractmethod
    def _load(self, records: Iterable[FixtureRecord]) -> None:
        """Write every record; raise LoadError on an engine failure."""
        ...

    def _record_commit(self, table: TableSpec, rows: int, batch: bool = True) -> None:
        self._committed[table.name] = self._committed.get(table.name, 0) + rows
        self._metrics.rows_written_total.labels(
            table=table.name, strategy=self.strategy.value
        ).inc(rows)
        if batch:
            self._batches += 1
            self._metrics.batches_total.labels(
                strategy=self.strategy.value, status="committed"
            ).inc()

    def _durable_counts(self) -> dict[str, int]:
        return self._committed

    def _fail(self, error: EngineError, table: TableSpec, rows: int) -> LoadError:
        self._metrics.batches_total.labels(strategy=self.strategy.value, status="failed").inc()
        logger.error(
            "batch_failed",
            strategy=self.strategy.value,
            table=table.name,
            rows=rows,
            committed=self._durable_counts(),
            error=str(error),
        )
        return LoadError(
            strategy=self.strategy,
            partial_state=self.partial_state,
            committed=self._durable_counts(),
            engine_message=str(error),
        )


class RowAtATimeLoader(_Loader):
    """One autocommitted insert per record."""

    strategy = LoadStrategy.ROW
    partial_state = "every row inserted before the failing one is committed"

    def _load(self, records: Iterable[FixtureRecord]) -> None:
        for record in records:
            table = record.TABLE
            try:
                self._session.insert_row(table, record.as_row())
            except EngineError as e:
                raise self._fail(e, table, 1) from e
            # Per-row batch counters would swamp the metric
            self._record_commit(table, 1, batch=False)


class BatchedLoader(_Loader):
    """Groups consecutive same-table records into transactions.

    A batch is flushed when it reaches ``batch_size`` rows or when the
    stream moves on to another table, so rooms are always committed before
    the first log batch that references them.
    """

    strategy = LoadStrategy.BATCHED
    partial_state = (
        "batches committed before the failing one are kept; "
        "the failing batch is rolled back in full"
    )

    def __init__(
        self,
        session: DatabaseSession,
        batch_size: int = 1000,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        super().__init__(session, metrics)
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def _load(self, records: Iterable[FixtureRecord]) -> None:
        table: TableSpec | None = None
        rows: list[tuple[Any, ...]] = []

        for record in records:
            if table is not None and (record.TABLE is not table or len(rows) >= self._batch_size):
                self._flush(table, rows)
                rows = []
            table = record.TABLE
            rows.append(record.as_row())

        if table is not None and rows:
            self._flush(table, rows)

    def _flush(self, table: TableSpec, rows: list[tuple[Any, ...]]) -> None:
        try:
            self._session.insert_batch(table, rows)
        except EngineError as e:
            raise self._fail(e, table, len(rows)) from e
        self._record_commit(table, len(rows))
        logger.debug("batch_committed", table=table.name, rows=len(rows), batch=self._batches)


class BulkCsvLoader(_Loader):
    """Spools every record as CSV, then bulk-imports one file per table."""

    strategy = LoadStrategy.CSV
    partial_state = (
        "tables imported before the failing one are committed; "
        "the failing table receives no rows"
    )

    def __init__(
        self,
        session: DatabaseSession,
        spool_dir: Path | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        super().__init__(session, metrics)
        self._spool_dir = spool_dir

    def _load(self, records: Iterable[FixtureRecord]) -> None:
        with CsvSpool(self._spool_dir) as spool:
            spool.write_all(records)
            logger.info(
                "csv_spooled",
                directory=str(spool.directory),
                rows={table.name: spool.count(table) for table, _ in spool.files()},
            )
            for table, path in spool.files():
                try:
                    imported = self._session.import_csv(table, path)
                except EngineError as e:
                    raise self._fail(e, table, spool.count(table)) from e
                self._record_commit(table, imported)


class VolatileBuildLoader(BatchedLoader):
    """Batches rows into a volatile database that is persisted afterwards.

    The session must be volatile. Writing the finished database to the
    target is the pipeline's job, after indexes are built, so until then
    nothing is durable.
    """

    strategy = LoadStrategy.MEMORY
    partial_state = "nothing was written to the target; it does not exist"

    def __init__(
        self,
        session: DatabaseSession,
        batch_size: int = 1000,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        if not session.volatile:
            raise ValueError("VolatileBuildLoader needs a volatile session")
        super().__init__(session, batch_size, metrics)

    def _durable_counts(self) -> dict[str, int]:
        return {}


def create_loader(
    strategy: LoadStrategy,
    session: DatabaseSession,
    config: LoaderConfig | None = None,
    metrics: MetricsRegistry | None = None,
) -> _Loader:
    """Build the loader for ``strategy``.

    Args:
        strategy: Which loading strategy to use.
        session: Open session; must be volatile for ``MEMORY``.
        config: Batch size and spool directory. Defaults if None.
        metrics: Metrics registry. The global one if None.
    """
    config = config or LoaderConfig()
    if strategy is LoadStrategy.ROW:
        return RowAtATimeLoader(session, metrics)
    if strategy is LoadStrategy.BATCHED:
        return BatchedLoader(session, config.batch_size, metrics)
    if strategy is LoadStrategy.CSV:
        return BulkCsvLoader(session, config.spool_dir, metrics)
    if strategy is LoadStrategy.MEMORY:
        return VolatileBuildLoader(session, config.batch_size, metrics)
    raise ValueError(f"Unknown load strategy: {strategy}")
