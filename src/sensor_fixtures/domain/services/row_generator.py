"""Synthetic row generator.

Produces a lazy, finite stream of fixture records: ``N`` rooms, then ``M``
sensor logs for each room. The stream is the producer stage of the fixture
pipeline; loaders consume it record by record.

Randomness:
    All sampling goes through one ``random.Random`` seeded from the
    constructor argument. Every call to :meth:`RowGenerator.records` (or
    :meth:`RowGenerator.rooms`) starts a fresh stream from that seed, so a
    seeded generator is restartable and yields the same sequence each time.
    Without a seed each call draws fresh OS entropy.

Ordering:
    Rooms are yielded before any log, and room ids run from 1 to N, so every
    log's ``room_id`` refers to a room the consumer has already seen.
"""

from __future__ import annotations

import random
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterator

from sensor_fixtures.domain.entities import (
    TIMESTAMP_FORMAT,
    FixtureRecord,
    Room,
    SensorLog,
)
from sensor_fixtures.domain.value_objects.profile import SensorProfile


class RoomNumberAllocator:
    """Hands out unique ``<initial><floor><seq:02d>`` room numbers.

    A random draw that collides with an already issued number falls back to
    a free sequence on the same initial and floor. When that pair has no free
    sequence left, it is marked exhausted and the caller must draw a new
    building and floor.
    """

    def __init__(self, profile: SensorProfile, rng: random.Random) -> None:
        self._profile = profile
        self._rng = rng
        self._issued: dict[tuple[str, int], set[int]] = defaultdict(set)

    def allocate(self, building: str, floor: int) -> str | None:
        """Return a fresh room number, or None if the pair is exhausted."""
        key = (building[0], floor)
        issued = self._issued[key]
        sequence_range = self._profile.room_sequence

        seq = sequence_range.sample(self._rng)
        if seq in issued:
            free = [
                s for s in range(sequence_range.low, sequence_range.high + 1)
                if s not in issued
            ]
            if not free:
                return None
            seq = self._rng.choice(free)

        issued.add(seq)
        return f"{building[0]}{floor}{seq:02d}"


class RowGenerator:
    """Generates rooms and their sensor logs.

    Example:
        >>> gen = RowGenerator(rooms=2, logs_per_room=3, seed=7)
        >>> [type(r).__name__ for r in gen.records()]
        ['Room', 'Room', 'SensorLog', 'SensorLog', 'SensorLog', 'SensorLog', 'SensorLog', 'SensorLog']
    """

    def __init__(
        self,
        rooms: int,
        logs_per_room: int,
        profile: SensorProfile | None = None,
        seed: int | None = None,
        reference_time: datetime | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            rooms: Number of rooms N (>= 0).
            logs_per_room: Number of logs M per room (>= 0).
            profile: Ranges and pools; tutorial defaults if None.
            seed: Seed for a reproducible stream. None means unseeded.
            reference_time: End of the timestamp window. Defaults to now,
                truncated to whole seconds.

        Raises:
            ValueError: If a count is negative or the pools cannot produce
                ``rooms`` distinct room numbers.
        """
        if rooms < 0:
            raise ValueError(f"rooms must be >= 0, got {rooms}")
        if logs_per_room < 0:
            raise ValueError(f"logs_per_room must be >= 0, got {logs_per_room}")

        self._profile = profile or SensorProfile()
        if rooms > self._profile.room_number_capacity:
            raise ValueError(
                f"Cannot generate {rooms} unique room numbers; the configured pools "
                f"allow at most {self._profile.room_number_capacity}"
            )

        self._rooms = rooms
        self._logs_per_room = logs_per_room
        self._seed = seed
        self._reference_time = (reference_time or datetime.now()).replace(microsecond=0)

    @property
    def room_count(self) -> int:
        return self._rooms

    @property
    def logs_per_room(self) -> int:
        return self._logs_per_room

    @property
    def expected_log_count(self) -> int:
        return self._rooms * self._logs_per_room

    @property
    def profile(self) -> SensorProfile:
        return self._profile

    @property
    def reference_time(self) -> datetime:
        return self._reference_time

    def _new_rng(self) -> random.Random:
        return random.Random(self._seed)

    def records(self) -> Iterator[FixtureRecord]:
        """Yield all rooms, then every room's logs in room order."""
        rng = self._new_rng()
        rooms = list(self._generate_rooms(rng))
        yield from rooms
        for room in rooms:
            yield from self._generate_logs(rng, room.id)

    def rooms(self) -> Iterator[Room]:
        """Yield only the rooms (same values as the head of :meth:`records`)."""
        yield from self._generate_rooms(self._new_rng())

    def logs_for(self, room: Room | int, rng: random.Random | None = None) -> Iterator[SensorLog]:
        """Yield M logs for one room, given as a :class:`Room` or its id.

        Uses ``rng`` when given, otherwise a fresh stream from the seed.
        """
        room_id = room.id if isinstance(room, Room) else room
        yield from self._generate_logs(rng or self._new_rng(), room_id)

    def _generate_rooms(self, rng: random.Random) -> Iterator[Room]:
        profile = self._profile
        allocator = RoomNumberAllocator(profile, rng)
        exhausted: set[tuple[str, int]] = set()

        for room_id in range(1, self._rooms + 1):
            while True:
                building = rng.choice(profile.buildings)
                floor = profile.floor_number.sample(rng)
                if (building[0], floor) in exhausted:
                    continue
                room_number = allocator.allocate(building, floor)
                if room_number is None:
                    exhausted.add((building[0], floor))
                    continue
                break

            yield Room(
                id=room_id,
                room_number=room_number,
                building_name=building,
                floor_number=floor,
                room_type=rng.choice(profile.room_types),
                capacity=profile.capacity.sample(rng),
            )

    def _generate_logs(self, rng: random.Random, room_id: int) -> Iterator[SensorLog]:
        profile = self._profile
        window_seconds = profile.window_days * 86400

        for _ in range(self._logs_per_room):
            offset = rng.randrange(window_seconds)
            timestamp = self._reference_time - timedelta(seconds=offset)

            yield SensorLog(
                room_id=room_id,
                timestamp=timestamp.strftime(TIMESTAMP_FORMAT),
                temperature_celsius=profile.temperature_celsius.sample(rng),
                humidity_percent=profile.humidity_percent.sample(rng),
                pressure_hpa=profile.pressure_hpa.sample(rng),
                co2_ppm=profile.co2_ppm.sample(rng),
                light_lux=profile.light_lux.sample(rng),
                noise_db=profile.noise_db.sample(rng),
                motion_detected=rng.randint(0, 1),
                air_quality_index=profile.air_quality_index.sample(rng),
                occupancy_count=profile.occupancy_count.sample(rng),
                voltage_v=profile.voltage_v.sample(rng),
                power_consumption_w=profile.power_consumption_w.sample(rng),
            )
