"""Database Session port for reaching the SQLite engine.

This outbound port defines the contract every engine backend implements.
The fixture generator never talks to SQLite directly: the loaders, index
builder and verifier only see a session.

Two backends implement it:
- the in-process native binding (prepare/bind/step style calls)
- the ``sqlite3`` command-line shell, fed SQL text and read back as CSV

A session is either durable (opened on the target file) or volatile (an
in-memory database that only reaches the target through :meth:`persist`).
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Any, Protocol, Sequence

from sensor_fixtures.domain.value_objects import TableSpec


class EngineError(Exception):
    """An error reported by the database engine.

    ``str(error)`` is the engine's own message, forwarded verbatim.
    """


class DatabaseSession(Protocol):
    """Protocol for executing statements against one database.

    Thread Safety:
        None. A session is owned by a single pipeline run.
    """

    @property
    @abstractmethod
    def volatile(self) -> bool:
        """True if writes are not durable until :meth:`persist`."""
        ...

    @abstractmethod
    def execute_script(self, sql: str) -> None:
        """Execute one or more semicolon-separated statements in autocommit.

        Raises:
            EngineError: If any statement fails.
        """
        ...

    @abstractmethod
    def insert_row(self, table: TableSpec, row: Sequence[Any]) -> None:
        """Insert a single row, committed on its own.

        Raises:
            EngineError: If the insert fails. Nothing is written.
        """
        ...

    @abstractmethod
    def insert_batch(self, table: TableSpec, rows: Sequence[Sequence[Any]]) -> None:
        """Insert many rows inside one explicit transaction.

        Either every row is committed or, on failure, none is.

        Raises:
            EngineError: If any row fails. The transaction is rolled back.
        """
        ...

    @abstractmethod
    def import_csv(self, table: TableSpec, csv_path: Path) -> int:
        """Bulk-import a CSV file with a header row into ``table``.

        The import is all-or-nothing: a malformed or conflicting row
        anywhere in the file fails the whole import.

        Returns:
            Number of rows imported.

        Raises:
            EngineError: If the import fails. Nothing is written.
        """
        ...

    @abstractmethod
    def query(self, sql: str) -> list[tuple[Any, ...]]:
        """Run a read-only query and return all rows.

        Raises:
            EngineError: If the query fails.
        """
        ...

    @abstractmethod
    def persist(self, target: Path) -> None:
        """Copy a volatile database to ``target`` in one step.

        A no-op for durable sessions.

        Raises:
            EngineError: If the copy fails. The target is not created.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the session and release resources."""
        ...

    def __enter__(self) -> "DatabaseSession":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
