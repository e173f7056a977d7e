"""Loading strategies and engine backends."""

from __future__ import annotations

from enum import Enum


class LoadStrategy(Enum):
    """How generated rows are written, with different durability tradeoffs.

    ROW: One autocommitted insert per record (slowest, every row durable)
    BATCHED: Multi-row inserts, one explicit transaction per batch
    CSV: Spool all rows as CSV, then one bulk import per table
    MEMORY: Build in a volatile database, then copy it to the target once
    """

    ROW = "row"
    BATCHED = "batched"
    CSV = "csv"
    MEMORY = "memory"

    @property
    def volatile(self) -> bool:
        """True if rows are staged in non-durable storage before persisting."""
        return self is LoadStrategy.MEMORY


class Backend(Enum):
    """How the SQLite engine is reached.

    BINDING: In-process native binding (prepare/bind/step)
    CLI: The ``sqlite3`` command-line shell, fed SQL text on stdin
    """

    BINDING = "binding"
    CLI = "cli"
