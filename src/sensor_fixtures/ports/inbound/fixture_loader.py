"""Fixture Loader port for persisting generated records.

This inbound port defines the contract shared by every loading strategy:
consume a stream of records in order and write them to a database session.

On success the target holds exactly the records consumed, with referential
integrity intact. On failure the state left behind depends on the strategy,
and the strategy must say so: every :class:`LoadError` carries the
strategy's ``partial_state`` description and the per-table row counts that
were already committed when the failure happened.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from sensor_fixtures.domain.entities import FixtureRecord
from sensor_fixtures.domain.value_objects import LoadStrategy


@dataclass
class LoadReport:
    """Outcome of a successful load."""

    strategy: LoadStrategy
    rows_written: dict[str, int] = field(default_factory=dict)
    batches_committed: int = 0
    elapsed_seconds: float = 0.0

    def count(self, table: str) -> int:
        """Rows written to ``table`` (0 if none)."""
        return self.rows_written.get(table, 0)

    @property
    def total_rows(self) -> int:
        return sum(self.rows_written.values())


class LoadError(Exception):
    """A load step failed.

    Attributes:
        strategy: Strategy that was loading
        partial_state: What the target holds after this failure
        committed: Rows per table durably committed before the failure
        engine_message: The engine's error text, verbatim
    """

    def __init__(
        self,
        strategy: LoadStrategy,
        partial_state: str,
        committed: dict[str, int],
        engine_message: str,
    ) -> None:
        self.strategy = strategy
        self.partial_state = partial_state
        self.committed = dict(committed)
        self.engine_message = engine_message
        committed_text = ", ".join(f"{t}={n}" for t, n in self.committed.items()) or "none"
        super().__init__(
            f"{strategy.value} load failed: {engine_message} "
            f"(committed: {committed_text}; {partial_state})"
        )


class FixtureLoader(Protocol):
    """Protocol for a loading strategy."""

    @property
    @abstractmethod
    def strategy(self) -> LoadStrategy:
        """The strategy this loader implements."""
        ...

    @property
    @abstractmethod
    def partial_state(self) -> str:
        """What the target holds if a load with this strategy fails."""
        ...

    @property
    @abstractmethod
    def in_progress(self) -> bool:
        """True while :meth:`load` is consuming records."""
        ...

    @abstractmethod
    def load(self, records: Iterable[FixtureRecord]) -> LoadReport:
        """Write every record, in order.

        Args:
            records: Rooms before the logs that reference them.

        Returns:
            Row counts and timing.

        Raises:
            LoadError: If the engine rejects a write.
        """
        ...
