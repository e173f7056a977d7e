"""CSV spool for bulk text import.

Materializes fixture records as delimited text, one file per table with a
header row, before anything is handed to the engine. The spool holds a full
copy of the dataset, so a bulk load needs room for both the text files and
the final database.
"""

from __future__ import annotations

import csv
import tempfile
from pathlib import Path
from typing import IO, Any, Iterable

from sensor_fixtures.domain.entities import FixtureRecord
from sensor_fixtures.domain.value_objects import TABLES, TableSpec


class CsvSpool:
    """Writes records into per-table CSV files.

    Files are created lazily in table order; :meth:`files` returns them in
    that same order (rooms before sensor logs), which is the order they must
    be imported in.

    Example:
        >>> with CsvSpool() as spool:
        ...     spool.write_all(generator.records())
        ...     for table, path in spool.files():
        ...         session.import_csv(table, path)
    """

    def __init__(self, directory: Path | None = None) -> None:
        """Initialize the spool.

        Args:
            directory: Where to write. A private temporary directory is
                created (and removed on close) if None.
        """
        self._tempdir: tempfile.TemporaryDirectory | None = None
        if directory is None:
            self._tempdir = tempfile.TemporaryDirectory(prefix="sensor_fixtures_")
            directory = Path(self._tempdir.name)
        self._directory = Path(directory)
        self._handles: dict[str, IO[str]] = {}
        self._writers: dict[str, Any] = {}
        self._counts: dict[str, int] = {table.name: 0 for table in TABLES}

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, table: TableSpec) -> Path:
        return self._directory / f"{table.name}.csv"

    def count(self, table: TableSpec) -> int:
        """Rows spooled for ``table`` so far."""
        return self._counts[table.name]

    def write(self, record: FixtureRecord) -> None:
        table = record.TABLE
        writer = self._writers.get(table.name)
        if writer is None:
            handle = open(self.path_for(table), "w", newline="", encoding="utf-8")
            self._handles[table.name] = handle
            writer = csv.writer(handle)
            writer.writerow(table.columns)
            self._writers[table.name] = writer
        writer.writerow(record.as_row())
        self._counts[table.name] += 1

    def write_all(self, records: Iterable[FixtureRecord]) -> None:
        for record in records:
            self.write(record)
        self.flush()

    def flush(self) -> None:
        for handle in self._handles.values():
            handle.flush()

    def files(self) -> list[tuple[TableSpec, Path]]:
        """Spooled files in import order. Tables with no rows are skipped."""
        self.flush()
        return [
            (table, self.path_for(table))
            for table in TABLES
            if table.name in self._handles
        ]

    def close(self) -> None:
        for handle in self._handles.values():
            handle.close()
        self._handles.clear()
        self._writers.clear()
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None

    def __enter__(self) -> "CsvSpool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
