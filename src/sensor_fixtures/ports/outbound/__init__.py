"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the systems the fixture generator
drives, namely the SQLite engine behind a database session.
"""

from sensor_fixtures.ports.outbound.database_session import DatabaseSession, EngineError

__all__ = [
    "DatabaseSession",
    "EngineError",
]
