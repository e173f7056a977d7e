"""Sampling profile: every range and categorical pool the generator uses.

The defaults reproduce the ranges of the original tutorial scripts. The
temperature range is deliberately wider than anything realistic so that the
extreme-value demonstration queries have something to find.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sensor_fixtures.domain.value_objects.ranges import FloatRange, IntRange

DEFAULT_BUILDINGS = ("North Tower", "South Tower", "East Wing", "West Wing", "Central Hub")
DEFAULT_ROOM_TYPES = (
    "Office",
    "Conference Room",
    "Laboratory",
    "Storage",
    "Classroom",
    "Break Room",
)


@dataclass(frozen=True)
class SensorProfile:
    """Ranges and pools for one fixture run."""

    buildings: tuple[str, ...] = DEFAULT_BUILDINGS
    room_types: tuple[str, ...] = DEFAULT_ROOM_TYPES
    floor_number: IntRange = IntRange(1, 10)
    capacity: IntRange = IntRange(5, 54)
    room_sequence: IntRange = IntRange(1, 99)
    window_days: int = 30

    temperature_celsius: FloatRange = FloatRange(10.0, 70.0, 1)
    humidity_percent: FloatRange = FloatRange(20.0, 100.0, 1)
    pressure_hpa: FloatRange = FloatRange(1000.0, 1050.0, 1)
    co2_ppm: IntRange = IntRange(400, 1899)
    light_lux: FloatRange = FloatRange(0.0, 2000.0, 1)
    noise_db: FloatRange = FloatRange(30.0, 110.0, 1)
    air_quality_index: IntRange = IntRange(1, 300)
    occupancy_count: IntRange = IntRange(0, 19)
    voltage_v: FloatRange = FloatRange(200.0, 250.0, 2)
    power_consumption_w: FloatRange = FloatRange(100.0, 5100.0, 2)

    # Numeric sensor_logs columns checked by the verifier
    numeric_log_fields: tuple[str, ...] = field(
        default=(
            "temperature_celsius",
            "humidity_percent",
            "pressure_hpa",
            "co2_ppm",
            "light_lux",
            "noise_db",
            "air_quality_index",
            "occupancy_count",
            "voltage_v",
            "power_consumption_w",
        ),
        repr=False,
    )

    def __post_init__(self) -> None:
        if not self.buildings:
            raise ValueError("buildings pool must not be empty")
        if not self.room_types:
            raise ValueError("room_types pool must not be empty")
        if any(not name for name in self.buildings):
            raise ValueError("building names must be non-empty")
        if self.window_days < 1:
            raise ValueError(f"window_days must be >= 1, got {self.window_days}")
        if self.floor_number.low < 0 or self.room_sequence.low < 0:
            raise ValueError("floor numbers and room sequences must be non-negative")
        if self.room_sequence.high > 99:
            raise ValueError("room sequence is rendered with two digits, max 99")

    def range_for(self, column: str) -> IntRange | FloatRange:
        """Return the sampling range of a sensor_logs column."""
        if column not in self.numeric_log_fields:
            raise KeyError(f"No range configured for column {column!r}")
        return getattr(self, column)

    @property
    def building_initials(self) -> tuple[str, ...]:
        """Distinct first letters of the building pool, in pool order."""
        return tuple(dict.fromkeys(name[0] for name in self.buildings))

    @property
    def room_number_capacity(self) -> int:
        """Upper bound on distinct room numbers the pools can produce."""
        return (
            len(self.building_initials)
            * self.floor_number.size
            * self.room_sequence.size
        )
