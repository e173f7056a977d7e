"""Domain entities for the fixture generator.

Exports:
    - Room: A room referenced by sensor logs
    - SensorLog: One synthetic sensor reading
    - FixtureRecord: Either of the above
    - TIMESTAMP_FORMAT: Text form of sensor log timestamps
"""

from sensor_fixtures.domain.entities.records import (
    TIMESTAMP_FORMAT,
    FixtureRecord,
    Room,
    SensorLog,
)

__all__ = [
    "Room",
    "SensorLog",
    "FixtureRecord",
    "TIMESTAMP_FORMAT",
]
