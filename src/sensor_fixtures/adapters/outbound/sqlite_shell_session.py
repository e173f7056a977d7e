"""Command-line shell Database Session.

This adapter implements the DatabaseSession protocol by driving the
``sqlite3`` shell as a subprocess: SQL text goes in on stdin, results come
back as CSV on stdout, and the engine's diagnostics on stderr are forwarded
verbatim as :class:`EngineError` messages.

SQL text is rendered with sqlglot, never by string concatenation of
values, so literal quoting always follows the SQLite dialect.

Modes:
    Durable: one shell invocation per unit of work (a row, a batch, an
        import) against the target file. ``-bail`` stops the shell on the
        first error, and an open transaction dies with the process, so a
        failed batch leaves nothing behind.
    Volatile: a single long-lived shell on ``:memory:`` receives every
        statement; :meth:`SqliteShellSession.persist` ends the script with
        ``.backup`` to write the finished database to the target at once.
        Errors surface when the shell exits, at the latest on persist.
"""

from __future__ import annotations

import csv
import io
import subprocess
import tempfile
from pathlib import Path
from typing import IO, Any, Sequence

from sqlglot import exp

from sensor_fixtures.domain.value_objects import FAST_PRAGMAS, FOREIGN_KEYS_PRAGMA, TableSpec
from sensor_fixtures.infrastructure.logging import get_logger
from sensor_fixtures.ports.outbound import EngineError

logger = get_logger(__name__)

SHELL_FLAGS = ("-bail", "-batch")
QUERY_FLAGS = ("-csv", "-noheader")
MEMORY_DATABASE = ":memory:"
DIALECT = "sqlite"


def render_insert(table: TableSpec, rows: Sequence[Sequence[Any]]) -> str:
    """Render a multi-row INSERT for ``table``.

    Example:
        >>> render_insert(ROOMS, [(1, "N105", "North Tower", 1, "Office", 20)])
        "INSERT INTO rooms (id, room_number, ...) VALUES (1, 'N105', ...)"
    """
    statement = exp.insert(
        exp.values([tuple(row) for row in rows]),
        table.name,
        columns=list(table.columns),
        dialect=DIALECT,
    )
    return statement.sql(dialect=DIALECT)


def render_copy_from_staging(table: TableSpec, staging: str, columns: Sequence[str]) -> str:
    """Render ``INSERT INTO table (cols) SELECT cols FROM staging``."""
    statement = exp.insert(
        exp.select(*(exp.column(name) for name in columns)).from_(exp.to_table(staging)),
        table.name,
        columns=list(columns),
        dialect=DIALECT,
    )
    return statement.sql(dialect=DIALECT)


def _coerce(value: str) -> Any:
    """Turn shell CSV output back into Python values.

    Empty fields are NULL; integers and reals are parsed; anything else is
    text.
    """
    if value == "":
        return None
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def _dot_argument(path: Path) -> str:
    """Quote a file path for a dot-command."""
    text = str(path)
    if "'" in text:
        raise EngineError(f"Path {text!r} cannot be passed to the sqlite3 shell")
    return f"'{text}'"


class SqliteShellSession:
    """DatabaseSession backed by the ``sqlite3`` command-line shell.

    Attributes:
        path: Target file, or None for a volatile session.
        volatile: True if the database lives in the shell's memory until
            persisted.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        volatile: bool = False,
        binary: str = "sqlite3",
        fast_pragmas: bool = False,
    ) -> None:
        """Open the session.

        Args:
            path: Database file. Required unless ``volatile``.
            volatile: Keep one in-memory shell alive until persist.
            binary: The sqlite3 executable.
            fast_pragmas: Turn off synchronous writes and journal in memory.
                Always applied to volatile sessions.

        Raises:
            ValueError: If a durable session has no path.
            EngineError: If the volatile shell cannot be started.
        """
        if path is None and not volatile:
            raise ValueError("A durable session needs a database path")

        self._path = Path(path) if path is not None else None
        self._volatile = volatile
        self._binary = binary
        self._fast_pragmas = fast_pragmas or volatile
        self._process: subprocess.Popen | None = None
        self._stderr: IO[str] | None = None
        self._closed = False

        if volatile:
            self._start_volatile()

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def volatile(self) -> bool:
        return self._volatile

    def execute_script(self, sql: str) -> None:
        script = sql.strip()
        if not script.endswith(";"):
            script += ";"
        self._write(script + "\n")

    def insert_row(self, table: TableSpec, row: Sequence[Any]) -> None:
        self._write(render_insert(table, [row]) + ";\n")

    def insert_batch(self, table: TableSpec, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        self._write("BEGIN;\n" + render_insert(table, rows) + ";\nCOMMIT;\n")

    def import_csv(self, table: TableSpec, csv_path: Path) -> int:
        """Import a CSV file through a staging table, all-or-nothing.

        The shell's ``.import`` loads the file into an untyped staging
        table; one ``INSERT … SELECT`` then moves every row into ``table``
        so that a constraint violation on any row fails the whole statement.
        A guard row pins the staged row count, and the transaction around
        all of it is only committed if every step succeeded.
        """
        header, expected = self._scan_csv(table, csv_path)
        if not header or expected == 0:
            return 0

        staging = f"_staging_{table.name}"
        guard = f"_import_guard_{table.name}"
        column_list = ", ".join(f'"{name}"' for name in header)
        script = "\n".join(
            [
                "BEGIN;",
                f'CREATE TABLE "{staging}" ({column_list});',
                f".import --csv --skip 1 {_dot_argument(csv_path)} {staging}",
                f"CREATE TEMP TABLE {guard} (n INTEGER CHECK (n = {expected}));",
                f'INSERT INTO {guard} SELECT COUNT(*) FROM "{staging}";',
                render_copy_from_staging(table, staging, header) + ";",
                f'DROP TABLE "{staging}";',
                f"DROP TABLE {guard};",
                "COMMIT;",
                "",
            ]
        )
        self._write(script)
        return expected

    def query(self, sql: str) -> list[tuple[Any, ...]]:
        self._check_open()
        if self._volatile:
            raise EngineError("A volatile shell session cannot be queried before persist")

        output = self._run(sql.strip().rstrip(";") + ";\n", extra_flags=QUERY_FLAGS, preamble=False)
        reader = csv.reader(io.StringIO(output))
        return [tuple(_coerce(value) for value in row) for row in reader if row]

    def persist(self, target: Path) -> None:
        """Finish the volatile script with ``.backup`` and wait for the shell."""
        self._check_open()
        if not self._volatile:
            return

        target = Path(target)
        self._write(f".backup main {_dot_argument(target)}\n")
        returncode = self._finish()
        if returncode != 0:
            target.unlink(missing_ok=True)
            raise EngineError(self._stderr_text() or f"{self._binary} exited with status {returncode}")

        logger.debug("volatile_database_persisted", target=str(target))

    def close(self) -> None:
        if self._closed:
            return
        if self._process is not None and self._process.poll() is None:
            # Discard the in-memory database without writing anything
            self._process.kill()
            self._process.wait()
        if self._stderr is not None:
            self._stderr.close()
        self._process = None
        self._closed = True

    def _preamble(self) -> str:
        statements = [FOREIGN_KEYS_PRAGMA]
        if self._fast_pragmas:
            statements.extend(FAST_PRAGMAS)
        return "".join(f"{statement};\n" for statement in statements)

    def _start_volatile(self) -> None:
        self._stderr = tempfile.TemporaryFile(mode="w+", encoding="utf-8")
        try:
            self._process = subprocess.Popen(
                [self._binary, *SHELL_FLAGS, MEMORY_DATABASE],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            self._stderr.close()
            raise EngineError(str(e)) from e
        self._write(self._preamble())

    def _write(self, script: str) -> None:
        self._check_open()
        if not self._volatile:
            self._run(script)
            return

        process = self._process
        if process is None:
            raise RuntimeError("Volatile shell session already persisted")
        try:
            process.stdin.write(script)
        except BrokenPipeError:
            pass
        if process.poll() is not None:
            returncode = self._finish()
            raise EngineError(self._stderr_text() or f"{self._binary} exited with status {returncode}")

    def _run(
        self,
        script: str,
        extra_flags: Sequence[str] = (),
        preamble: bool = True,
    ) -> str:
        """Run one shell invocation against the target file."""
        stdin = (self._preamble() if preamble else "") + script
        try:
            completed = subprocess.run(
                [self._binary, *SHELL_FLAGS, *extra_flags, str(self._path)],
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise EngineError(str(e)) from e

        if completed.returncode != 0:
            message = completed.stderr.strip()
            raise EngineError(message or f"{self._binary} exited with status {completed.returncode}")
        return completed.stdout

    def _finish(self) -> int:
        """Close the volatile shell's stdin and wait for it to exit."""
        process = self._process
        if process is None:
            raise RuntimeError("Volatile shell session already persisted")
        try:
            process.stdin.close()
        except BrokenPipeError:
            pass
        returncode = process.wait()
        self._process = None
        return returncode

    def _stderr_text(self) -> str:
        if self._stderr is None:
            return ""
        self._stderr.seek(0)
        return self._stderr.read().strip()

    def _scan_csv(self, table: TableSpec, csv_path: Path) -> tuple[list[str], int]:
        """Check the file's shape and count its data rows.

        The shell's ``.import`` pads short rows and truncates long ones
        with only a warning, so ragged rows are rejected here.
        """
        with open(csv_path, newline="", encoding="utf-8") as handle:
            reader = csv.reader(handle)
            header = next(reader, None)
            if header is None:
                return [], 0
            unknown = [name for name in header if name not in table.columns]
            if unknown:
                raise EngineError(
                    f"{csv_path}: unknown columns for table {table.name}: {', '.join(unknown)}"
                )
            count = 0
            for row in reader:
                if len(row) != len(header):
                    raise EngineError(
                        f"{csv_path}:{reader.line_num}: expected {len(header)} columns "
                        f"but found {len(row)}"
                    )
                count += 1
        return header, count

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")

    def __enter__(self) -> "SqliteShellSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
