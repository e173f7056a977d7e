"""Domain services for the fixture generator.

Exports:
    - RowGenerator: Lazy, seedable producer of rooms and sensor logs
    - RoomNumberAllocator: Unique room-number issuer used by the generator
"""

from sensor_fixtures.domain.services.row_generator import RoomNumberAllocator, RowGenerator

__all__ = [
    "RowGenerator",
    "RoomNumberAllocator",
]
