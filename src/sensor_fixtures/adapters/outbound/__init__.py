"""Outbound adapters - implementations of outbound ports.

These adapters reach the SQLite engine, either in-process through the
native binding or by driving the ``sqlite3`` shell, and spool rows as CSV
for bulk import.
"""

from __future__ import annotations

from pathlib import Path

from sensor_fixtures.adapters.outbound.csv_spool import CsvSpool
from sensor_fixtures.adapters.outbound.sqlite_binding_session import SqliteBindingSession
from sensor_fixtures.adapters.outbound.sqlite_shell_session import SqliteShellSession
from sensor_fixtures.domain.value_objects import Backend
from sensor_fixtures.ports.outbound import DatabaseSession


def open_session(
    backend: Backend,
    target: Path | None = None,
    volatile: bool = False,
    sqlite_binary: str = "sqlite3",
    fast_pragmas: bool = False,
) -> DatabaseSession:
    """Open a session on the chosen backend.

    Args:
        backend: Native binding or command-line shell.
        target: Database file. Ignored for volatile sessions.
        volatile: Build in memory until :meth:`DatabaseSession.persist`.
        sqlite_binary: Shell executable, used by the CLI backend only.
        fast_pragmas: Trade durability for speed on durable targets.
    """
    path = None if volatile else target
    if backend is Backend.CLI:
        return SqliteShellSession(
            path,
            volatile=volatile,
            binary=sqlite_binary,
            fast_pragmas=fast_pragmas,
        )
    return SqliteBindingSession(path, volatile=volatile, fast_pragmas=fast_pragmas)


__all__ = [
    "CsvSpool",
    "SqliteBindingSession",
    "SqliteShellSession",
    "open_session",
]
