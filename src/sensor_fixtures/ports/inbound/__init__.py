"""Inbound ports - API contracts for the fixture generator.

Inbound ports define what the pipeline offers its callers: loading
strategies with a documented failure postcondition, and the shape of
verification results.
"""

from sensor_fixtures.ports.inbound.fixture_loader import FixtureLoader, LoadError, LoadReport
from sensor_fixtures.ports.inbound.verification import (
    CheckResult,
    DemoResult,
    VerificationReport,
)

__all__ = [
    "FixtureLoader",
    "LoadError",
    "LoadReport",
    "CheckResult",
    "DemoResult",
    "VerificationReport",
]
