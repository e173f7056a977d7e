"""Canned read-only queries run against a freshly loaded fixture."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DemoQuery:
    """A titled demonstration query."""

    title: str
    sql: str


ROOM_COUNT_SQL = "SELECT COUNT(*) FROM rooms"
LOG_COUNT_SQL = "SELECT COUNT(*) FROM sensor_logs"

ORPHAN_LOGS_SQL = """
SELECT COUNT(*) FROM sensor_logs sl
LEFT JOIN rooms r ON r.id = sl.room_id
WHERE r.id IS NULL
"""

DUPLICATE_ROOM_NUMBERS_SQL = "SELECT COUNT(*) - COUNT(DISTINCT room_number) FROM rooms"

TEMPERATURE_EXTREMES_SQL = (
    "SELECT MIN(temperature_celsius), MAX(temperature_celsius) FROM sensor_logs"
)


# User tables and indexes; engine-internal objects (sqlite_stat1, autoindexes) are skipped
CATALOG_SQL = (
    "SELECT type, name FROM sqlite_master "
    "WHERE type IN ('table', 'index') AND name NOT LIKE 'sqlite_%' "
    "ORDER BY type DESC, name"
)

# Served by idx_sensor_logs_temperature once indexes exist
INDEXED_RANGE_TITLE = "Indexed range count (35-45°C)"
INDEXED_RANGE_SQL = (
    "SELECT COUNT(*) FROM sensor_logs WHERE temperature_celsius BETWEEN 35.0 AND 45.0"
)


def column_bounds_sql(table: str, column: str) -> str:
    """MIN/MAX of one column."""
    return f"SELECT MIN({column}), MAX({column}) FROM {table}"


DEMO_QUERIES: tuple[DemoQuery, ...] = (
    DemoQuery(
        "Room summary by building",
        "SELECT building_name, COUNT(*) AS room_count FROM rooms "
        "GROUP BY building_name ORDER BY building_name",
    ),
    DemoQuery(
        "Readings around 40°C (39-41°C)",
        "SELECT r.room_number, r.building_name, sl.temperature_celsius, sl.timestamp "
        "FROM rooms r JOIN sensor_logs sl ON r.id = sl.room_id "
        "WHERE sl.temperature_celsius BETWEEN 39.0 AND 41.0 "
        "ORDER BY sl.temperature_celsius DESC LIMIT 10",
    ),
    DemoQuery(
        "Average temperature by room",
        "SELECT r.room_number, r.building_name, "
        "ROUND(AVG(sl.temperature_celsius), 2) AS avg_temp "
        "FROM rooms r JOIN sensor_logs sl ON r.id = sl.room_id "
        "GROUP BY r.id ORDER BY avg_temp DESC LIMIT 10",
    ),
    DemoQuery(
        "Temperature extremes",
        "SELECT r.room_number, r.building_name, sl.temperature_celsius, sl.timestamp "
        "FROM rooms r JOIN sensor_logs sl ON r.id = sl.room_id "
        "WHERE sl.temperature_celsius = (SELECT MAX(temperature_celsius) FROM sensor_logs) "
        "OR sl.temperature_celsius = (SELECT MIN(temperature_celsius) FROM sensor_logs) "
        "LIMIT 10",
    ),
    DemoQuery(
        "Rooms with high temperature variance",
        "SELECT r.room_number, r.building_name, "
        "ROUND(AVG(sl.temperature_celsius), 2) AS avg_temp, "
        "ROUND(MIN(sl.temperature_celsius), 2) AS min_temp, "
        "ROUND(MAX(sl.temperature_celsius), 2) AS max_temp, "
        "ROUND(MAX(sl.temperature_celsius) - MIN(sl.temperature_celsius), 2) AS temp_range "
        "FROM rooms r JOIN sensor_logs sl ON r.id = sl.room_id "
        "GROUP BY r.id HAVING temp_range > 30 ORDER BY temp_range DESC LIMIT 10",
    ),
    DemoQuery(
        "Humidity by temperature category",
        "SELECT CASE WHEN temperature_celsius < 20 THEN 'Cold' "
        "WHEN temperature_celsius < 30 THEN 'Moderate' "
        "WHEN temperature_celsius < 40 THEN 'Warm' ELSE 'Hot' END AS temp_category, "
        "ROUND(AVG(humidity_percent), 2) AS avg_humidity, COUNT(*) AS readings "
        "FROM sensor_logs GROUP BY temp_category ORDER BY temp_category",
    ),
    DemoQuery(
        "Motion detected above 35°C",
        "SELECT r.room_number, r.building_name, COUNT(*) AS high_temp_motion_events "
        "FROM rooms r JOIN sensor_logs sl ON r.id = sl.room_id "
        "WHERE sl.temperature_celsius > 35.0 AND sl.motion_detected = 1 "
        "GROUP BY r.id ORDER BY high_temp_motion_events DESC LIMIT 5",
    ),
    DemoQuery(
        "Daily temperature trend",
        "SELECT DATE(timestamp) AS date, ROUND(AVG(temperature_celsius), 2) AS avg_temp, "
        "ROUND(MIN(temperature_celsius), 2) AS min_temp, "
        "ROUND(MAX(temperature_celsius), 2) AS max_temp "
        "FROM sensor_logs GROUP BY DATE(timestamp) ORDER BY date DESC LIMIT 7",
    ),
)
