"""Static schema for the sensor fixture database.

The DDL is configuration, not generated: two tables, the secondary indexes
needed by the demonstration queries, and the statistics refresh that follows
index construction.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TableSpec:
    """A table the loader writes into.

    Attributes:
        name: Table name
        columns: Columns supplied on insert, in row-tuple order
        ddl: CREATE TABLE statement
    """

    name: str
    columns: tuple[str, ...]
    ddl: str

    @property
    def placeholders(self) -> str:
        """Parameter markers for a single-row prepared insert."""
        return ", ".join("?" for _ in self.columns)

    @property
    def insert_sql(self) -> str:
        """Parameterized single-row INSERT for the native binding."""
        return (
            f"INSERT INTO {self.name} ({', '.join(self.columns)}) "
            f"VALUES ({self.placeholders})"
        )


ROOMS = TableSpec(
    name="rooms",
    columns=(
        "id",
        "room_number",
        "building_name",
        "floor_number",
        "room_type",
        "capacity",
    ),
    ddl="""
CREATE TABLE rooms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_number TEXT UNIQUE NOT NULL,
    building_name TEXT NOT NULL,
    floor_number INTEGER NOT NULL,
    room_type TEXT NOT NULL,
    capacity INTEGER,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)""",
)

SENSOR_LOGS = TableSpec(
    name="sensor_logs",
    columns=(
        "room_id",
        "timestamp",
        "temperature_celsius",
        "humidity_percent",
        "pressure_hpa",
        "co2_ppm",
        "light_lux",
        "noise_db",
        "motion_detected",
        "air_quality_index",
        "occupancy_count",
        "voltage_v",
        "power_consumption_w",
    ),
    ddl="""
CREATE TABLE sensor_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id INTEGER NOT NULL,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
    temperature_celsius REAL NOT NULL,
    humidity_percent REAL NOT NULL,
    pressure_hpa REAL NOT NULL,
    co2_ppm INTEGER NOT NULL,
    light_lux REAL NOT NULL,
    noise_db REAL NOT NULL,
    motion_detected BOOLEAN DEFAULT 0,
    air_quality_index INTEGER NOT NULL,
    occupancy_count INTEGER DEFAULT 0,
    voltage_v REAL NOT NULL,
    power_consumption_w REAL NOT NULL,
    FOREIGN KEY (room_id) REFERENCES rooms(id)
)""",
)

# Rooms first: sensor_logs.room_id references rooms.id
TABLES: tuple[TableSpec, ...] = (ROOMS, SENSOR_LOGS)

TABLES_BY_NAME: dict[str, TableSpec] = {table.name: table for table in TABLES}

INDEX_STATEMENTS: tuple[str, ...] = (
    "CREATE INDEX idx_rooms_building ON rooms(building_name)",
    "CREATE INDEX idx_rooms_floor ON rooms(floor_number)",
    "CREATE INDEX idx_rooms_type ON rooms(room_type)",
    "CREATE INDEX idx_rooms_number ON rooms(room_number)",
    "CREATE INDEX idx_sensor_logs_room_id ON sensor_logs(room_id)",
    "CREATE INDEX idx_sensor_logs_timestamp ON sensor_logs(timestamp)",
    "CREATE INDEX idx_sensor_logs_temperature ON sensor_logs(temperature_celsius)",
    "CREATE INDEX idx_sensor_logs_humidity ON sensor_logs(humidity_percent)",
    "CREATE INDEX idx_sensor_logs_co2 ON sensor_logs(co2_ppm)",
    "CREATE INDEX idx_sensor_logs_room_temp ON sensor_logs(room_id, temperature_celsius)",
    "CREATE INDEX idx_sensor_logs_room_time ON sensor_logs(room_id, timestamp)",
    "CREATE INDEX idx_sensor_logs_temp_time ON sensor_logs(temperature_celsius, timestamp)",
    "CREATE INDEX idx_sensor_logs_motion ON sensor_logs(motion_detected)",
    "CREATE INDEX idx_sensor_logs_occupancy ON sensor_logs(occupancy_count)",
)

# "CREATE INDEX <name> ON ..."
INDEX_NAMES: tuple[str, ...] = tuple(statement.split()[2] for statement in INDEX_STATEMENTS)

STATISTICS_STATEMENT = "ANALYZE"

# Applied to volatile builds, and to durable ones when fast_pragmas is set
FAST_PRAGMAS: tuple[str, ...] = (
    "PRAGMA synchronous = OFF",
    "PRAGMA journal_mode = MEMORY",
    "PRAGMA cache_size = 1000000",
    "PRAGMA temp_store = MEMORY",
)

FOREIGN_KEYS_PRAGMA = "PRAGMA foreign_keys = ON"


def schema_script() -> str:
    """Return the CREATE TABLE statements as one script."""
    return ";\n".join(table.ddl.strip() for table in TABLES) + ";\n"
