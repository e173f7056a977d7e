"""Post-load index construction and statistics refresh."""

from __future__ import annotations

import time

from sensor_fixtures.domain.value_objects import INDEX_STATEMENTS, STATISTICS_STATEMENT
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.infrastructure.metrics import MetricsRegistry, get_metrics
from sensor_fixtures.ports.inbound import FixtureLoader
from sensor_fixtures.ports.outbound import DatabaseSession

logger = get_logger(__name__)


class IndexBuilder:
    """Creates the secondary indexes used by the demonstration queries.

    Indexes are built once over the loaded data rather than maintained
    row by row, so :meth:`build` refuses to run while the loader that
    shares its session is still consuming records.
    """

    def __init__(
        self,
        session: DatabaseSession,
        loader: FixtureLoader | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._session = session
        self._loader = loader
        self._metrics = metrics or get_metrics()

    def build(self) -> float:
        """Run every CREATE INDEX statement, then ANALYZE.

        Returns:
            Elapsed seconds.

        Raises:
            RuntimeError: If the load is still in progress.
            EngineError: If the engine rejects a statement.
        """
        if self._loader is not None and self._loader.in_progress:
            raise RuntimeError("Indexes must be built after the load has finished")

        started = time.perf_counter()
        for statement in INDEX_STATEMENTS:
            self._session.execute_script(statement)
        self._session.execute_script(STATISTICS_STATEMENT)
        elapsed = time.perf_counter() - started

        self._metrics.index_build_duration_seconds.observe(elapsed)
        logger.info(
            "indexes_built",
            indexes=len(INDEX_STATEMENTS),
            elapsed_seconds=round(elapsed, 3),
        )
        return elapsed
