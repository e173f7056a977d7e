"""Synthetic fixture records.

Rooms are created once per run and referenced by sensor logs through their
generator-assigned ``id``. Both record types are immutable after generation;
the database only ever sees them through :meth:`as_row`, whose tuple order
matches the ``columns`` of the corresponding :class:`TableSpec`.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import ClassVar, Union

from sensor_fixtures.domain.value_objects.schema import ROOMS, SENSOR_LOGS, TableSpec

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class Room:
    """A room that sensor logs are attached to.

    Attributes:
        id: Primary key, assigned sequentially from 1 by the generator
        room_number: Building initial + floor + 2-digit sequence, e.g. ``N305``
        building_name: Building from the configured pool
        floor_number: Floor within the building
        room_type: Room type from the configured pool
        capacity: Seating capacity
    """

    id: int
    room_number: str
    building_name: str
    floor_number: int
    room_type: str
    capacity: int

    TABLE: ClassVar[TableSpec] = ROOMS

    def as_row(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True, slots=True)
class SensorLog:
    """One reading from a room's sensors.

    Values are sampled independently; there is no correlation between, for
    example, temperature and power consumption. ``motion_detected`` is kept
    as 0/1 so that it round-trips through text unchanged.
    """

    room_id: int
    timestamp: str
    temperature_celsius: float
    humidity_percent: float
    pressure_hpa: float
    co2_ppm: int
    light_lux: float
    noise_db: float
    motion_detected: int
    air_quality_index: int
    occupancy_count: int
    voltage_v: float
    power_consumption_w: float

    TABLE: ClassVar[TableSpec] = SENSOR_LOGS

    def as_row(self) -> tuple:
        return astuple(self)


FixtureRecord = Union[Room, SensorLog]
