"""Value ranges used to sample synthetic field values.

Every generated field is drawn independently from a uniform distribution
over a closed interval (or from a categorical pool). The ranges are plain
immutable values so that they can be shared between the generator, which
samples from them, and the verifier, which checks loaded data against them.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal


@dataclass(frozen=True, slots=True)
class IntRange:
    """Closed integer interval ``[low, high]``.

    Example:
        >>> IntRange(400, 1899).contains(400)
        True
    """

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"low must be <= high, got [{self.low}, {self.high}]")

    @property
    def size(self) -> int:
        """Number of distinct values in the interval."""
        return self.high - self.low + 1

    def sample(self, rng: random.Random) -> int:
        return rng.randint(self.low, self.high)

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"[{self.low}, {self.high}]"


@dataclass(frozen=True, slots=True)
class FloatRange:
    """Closed real interval ``[low, high]`` sampled at fixed precision.

    Values are drawn as whole units of ``10 ** -precision`` between the
    smallest and largest such unit inside the interval, so a sample never
    falls outside ``[low, high]`` even when a bound has more decimals than
    ``precision`` keeps.

    Attributes:
        low: Lower bound (inclusive)
        high: Upper bound (inclusive)
        precision: Decimal places kept after sampling
    """

    low: float
    high: float
    precision: int = 1
    # Smallest and largest n with low <= n / 10**precision <= high
    first_unit: int = field(init=False, repr=False, compare=False)
    last_unit: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"low must be <= high, got [{self.low}, {self.high}]")
        if self.precision < 0:
            raise ValueError(f"precision must be non-negative, got {self.precision}")
        first = int(Decimal(repr(self.low)).scaleb(self.precision).to_integral_value(ROUND_CEILING))
        last = int(Decimal(repr(self.high)).scaleb(self.precision).to_integral_value(ROUND_FLOOR))
        if first > last:
            raise ValueError(
                f"no value with {self.precision} decimal(s) lies in [{self.low}, {self.high}]"
            )
        object.__setattr__(self, "first_unit", first)
        object.__setattr__(self, "last_unit", last)

    def sample(self, rng: random.Random) -> float:
        return rng.randint(self.first_unit, self.last_unit) / 10**self.precision

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"[{self.low}, {self.high}]"
