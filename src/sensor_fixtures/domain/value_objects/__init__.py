"""Value objects for the fixture generator domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Ranges:
        - IntRange, FloatRange: Closed sampling intervals
    Profile:
        - SensorProfile: Ranges and categorical pools for one run
    Strategy:
        - LoadStrategy: Row, batched, CSV bulk import, volatile build
        - Backend: Native binding or command-line shell
    Schema:
        - TableSpec, ROOMS, SENSOR_LOGS, TABLES: Static table definitions
        - INDEX_STATEMENTS, INDEX_NAMES, STATISTICS_STATEMENT: Post-load index DDL
    Queries:
        - DemoQuery, DEMO_QUERIES: Canned demonstration queries
"""

from sensor_fixtures.domain.value_objects.queries import DEMO_QUERIES, DemoQuery
from sensor_fixtures.domain.value_objects.profile import SensorProfile
from sensor_fixtures.domain.value_objects.ranges import FloatRange, IntRange
from sensor_fixtures.domain.value_objects.schema import (
    FAST_PRAGMAS,
    FOREIGN_KEYS_PRAGMA,
    INDEX_NAMES,
    INDEX_STATEMENTS,
    ROOMS,
    SENSOR_LOGS,
    STATISTICS_STATEMENT,
    TABLES,
    TABLES_BY_NAME,
    TableSpec,
    schema_script,
)
from sensor_fixtures.domain.value_objects.strategy import Backend, LoadStrategy

__all__ = [
    # Ranges
    "IntRange",
    "FloatRange",
    # Profile
    "SensorProfile",
    # Strategy
    "LoadStrategy",
    "Backend",
    # Schema
    "TableSpec",
    "ROOMS",
    "SENSOR_LOGS",
    "TABLES",
    "TABLES_BY_NAME",
    "INDEX_STATEMENTS",
    "INDEX_NAMES",
    "STATISTICS_STATEMENT",
    "FAST_PRAGMAS",
    "FOREIGN_KEYS_PRAGMA",
    "schema_script",
    # Queries
    "DemoQuery",
    "DEMO_QUERIES",
]
