"""Native-binding Database Session.

This adapter implements the DatabaseSession protocol on top of the
in-process SQLite binding. Statements are prepared once and stepped with
bound parameters; batches go through ``executemany`` inside an explicit
``BEGIN … COMMIT``.

The connection runs in autocommit mode (``isolation_level=None``) so the
binding never opens implicit transactions: every transaction boundary in
this module is spelled out.

A volatile session builds in ``:memory:`` and reaches the target only
through :meth:`SqliteBindingSession.persist`, which uses the online backup
API to copy the whole database in one step.
"""

from __future__ import annotations

import csv
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Sequence

from sensor_fixtures.domain.value_objects import FAST_PRAGMAS, FOREIGN_KEYS_PRAGMA, TableSpec
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.ports.outbound import EngineError

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"


class SqliteBindingSession:
    """DatabaseSession backed by the native SQLite binding.

    Attributes:
        path: Target file, or None for a volatile session.
        volatile: True if the database lives in memory until persisted.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        volatile: bool = False,
        fast_pragmas: bool = False,
    ) -> None:
        """Open the session.

        Args:
            path: Database file. Required unless ``volatile``.
            volatile: Build in memory and copy to the target on persist.
            fast_pragmas: Turn off synchronous writes and journal in memory.
                Always applied to volatile sessions.

        Raises:
            ValueError: If a durable session has no path.
            EngineError: If the database cannot be opened.
        """
        if path is None and not volatile:
            raise ValueError("A durable session needs a database path")

        self._path = Path(path) if path is not None else None
        self._volatile = volatile
        database = MEMORY_DATABASE if volatile else str(self._path)

        try:
            self._conn = sqlite3.connect(database, isolation_level=None)
            self._conn.execute(FOREIGN_KEYS_PRAGMA)
            if volatile or fast_pragmas:
                for pragma in FAST_PRAGMAS:
                    self._conn.execute(pragma)
        except sqlite3.Error as e:
            raise EngineError(str(e)) from e

        self._closed = False

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def volatile(self) -> bool:
        return self._volatile

    def execute_script(self, sql: str) -> None:
        self._check_open()
        try:
            self._conn.executescript(sql)
        except sqlite3.Error as e:
            raise EngineError(str(e)) from e

    def insert_row(self, table: TableSpec, row: Sequence[Any]) -> None:
        self._check_open()
        try:
            self._conn.execute(table.insert_sql, tuple(row))
        except sqlite3.Error as e:
            raise EngineError(str(e)) from e

    def insert_batch(self, table: TableSpec, rows: Sequence[Sequence[Any]]) -> None:
        self._check_open()
        self._in_transaction(lambda: self._conn.executemany(table.insert_sql, rows))

    def import_csv(self, table: TableSpec, csv_path: Path) -> int:
        """Import a CSV file in a single transaction.

        The header row names the columns. A row with the wrong number of
        fields, or one the engine rejects, rolls back the whole import.
        """
        self._check_open()
        with open(csv_path, newline="", encoding="utf-8") as handle:
            reader = csv.reader(handle)
            header = next(reader, None)
            if header is None:
                return 0
            unknown = [name for name in header if name not in table.columns]
            if unknown:
                raise EngineError(
                    f"{csv_path}: unknown columns for table {table.name}: {', '.join(unknown)}"
                )

            sql = (
                f"INSERT INTO {table.name} ({', '.join(header)}) "
                f"VALUES ({', '.join('?' for _ in header)})"
            )
            imported = 0

            def rows():
                nonlocal imported
                for row in reader:
                    imported += 1
                    yield row

            self._in_transaction(lambda: self._conn.executemany(sql, rows()))
            return imported

    def query(self, sql: str) -> list[tuple[Any, ...]]:
        self._check_open()
        try:
            return [tuple(row) for row in self._conn.execute(sql).fetchall()]
        except sqlite3.Error as e:
            raise EngineError(str(e)) from e

    def persist(self, target: Path) -> None:
        """Copy the in-memory database to ``target`` with the backup API."""
        self._check_open()
        if not self._volatile:
            return

        target = Path(target)
        try:
            with closing(sqlite3.connect(str(target))) as destination:
                self._conn.backup(destination)
        except sqlite3.Error as e:
            target.unlink(missing_ok=True)
            raise EngineError(str(e)) from e

        logger.debug("volatile_database_persisted", target=str(target))

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True

    def _in_transaction(self, work) -> None:
        try:
            self._conn.execute("BEGIN")
            work()
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
            raise EngineError(str(e)) from e

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")

    def __enter__(self) -> "SqliteBindingSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
