"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: What the pipeline offers (FixtureLoader, VerificationReport)
- Outbound ports: What it depends on (DatabaseSession)

Adapters implement these ports with concrete functionality.
"""

from sensor_fixtures.ports.inbound import (
    CheckResult,
    DemoResult,
    FixtureLoader,
    LoadError,
    LoadReport,
    VerificationReport,
)
from sensor_fixtures.ports.outbound import DatabaseSession, EngineError

__all__ = [
    # Inbound ports
    "CheckResult",
    "DemoResult",
    "FixtureLoader",
    "LoadError",
    "LoadReport",
    "VerificationReport",
    # Outbound ports
    "DatabaseSession",
    "EngineError",
]
