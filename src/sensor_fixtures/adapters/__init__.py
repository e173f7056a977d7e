"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (CLI)
- Outbound adapters: Reach the SQLite engine (native binding, sqlite3 shell)
"""

from sensor_fixtures.adapters.outbound import (
    CsvSpool,
    SqliteBindingSession,
    SqliteShellSession,
    open_session,
)

__all__ = [
    # Outbound adapters
    "CsvSpool",
    "SqliteBindingSession",
    "SqliteShellSession",
    "open_session",
]
