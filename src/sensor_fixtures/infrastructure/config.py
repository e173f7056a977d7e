"""Configuration management for the fixture generator."""

from __future__ import annotations

import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sensor_fixtures.domain.value_objects import (
    Backend,
    FloatRange,
    IntRange,
    LoadStrategy,
    SensorProfile,
)
from sensor_fixtures.domain.value_objects.profile import DEFAULT_BUILDINGS, DEFAULT_ROOM_TYPES


class ConfigurationError(Exception):
    """Raised when a run is misconfigured, before any row is generated."""


class FixtureConfig(BaseModel):
    """What to generate and where to put it."""

    rooms: int = Field(default=50, ge=0, description="Number of rooms N")
    logs_per_room: int = Field(default=1000, ge=0, description="Sensor logs per room M")
    target: Path = Field(default=Path("tutorial.db"), description="Target database file")
    clean: bool = Field(default=True, description="Delete the target before loading")
    seed: int | None = Field(default=None, description="Random seed; None for unseeded")


class LoaderConfig(BaseModel):
    """How rows reach the database."""

    strategy: Literal["row", "batched", "csv", "memory"] = Field(
        default="batched", description="Loading strategy"
    )
    backend: Literal["binding", "cli"] = Field(
        default="binding", description="Native binding or sqlite3 shell"
    )
    batch_size: int = Field(default=1000, ge=1, description="Rows per transaction")
    sqlite_binary: str = Field(default="sqlite3", description="sqlite3 shell executable")
    spool_dir: Path | None = Field(
        default=None, description="Directory for CSV spool files (temp dir if None)"
    )
    fast_pragmas: bool = Field(
        default=False, description="Trade durability for speed on durable targets"
    )

    @property
    def load_strategy(self) -> LoadStrategy:
        return LoadStrategy(self.strategy)

    @property
    def engine_backend(self) -> Backend:
        return Backend(self.backend)


class SensorRanges(BaseModel):
    """Overridable sampling ranges and pools.

    Each range is an inclusive ``(low, high)`` pair. Precision of real-valued
    fields is fixed by :class:`SensorProfile`.
    """

    buildings: tuple[str, ...] = DEFAULT_BUILDINGS
    room_types: tuple[str, ...] = DEFAULT_ROOM_TYPES
    floor_number: tuple[int, int] = (1, 10)
    capacity: tuple[int, int] = (5, 54)
    room_sequence: tuple[int, int] = (1, 99)
    window_days: int = Field(default=30, ge=1)

    temperature_celsius: tuple[float, float] = (10.0, 70.0)
    humidity_percent: tuple[float, float] = (20.0, 100.0)
    pressure_hpa: tuple[float, float] = (1000.0, 1050.0)
    co2_ppm: tuple[int, int] = (400, 1899)
    light_lux: tuple[float, float] = (0.0, 2000.0)
    noise_db: tuple[float, float] = (30.0, 110.0)
    air_quality_index: tuple[int, int] = (1, 300)
    occupancy_count: tuple[int, int] = (0, 19)
    voltage_v: tuple[float, float] = (200.0, 250.0)
    power_consumption_w: tuple[float, float] = (100.0, 5100.0)

    @field_validator(
        "floor_number",
        "capacity",
        "room_sequence",
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
    )
    @classmethod
    def _ordered(cls, value: tuple[float, float]) -> tuple[float, float]:
        low, high = value
        if low > high:
            raise ValueError(f"range low must be <= high, got {value}")
        return value

    def to_profile(self) -> SensorProfile:
        """Build the immutable domain profile.

        Raises:
            ConfigurationError: If the pools or ranges are inconsistent.
        """
        defaults = SensorProfile()
        kwargs: dict[str, Any] = {
            "buildings": tuple(self.buildings),
            "room_types": tuple(self.room_types),
            "window_days": self.window_days,
        }
        try:
            for name, value in self:
                default = getattr(defaults, name)
                if isinstance(default, FloatRange):
                    kwargs[name] = FloatRange(value[0], value[1], default.precision)
                elif isinstance(default, IntRange):
                    kwargs[name] = IntRange(value[0], value[1])
            return SensorProfile(**kwargs)
        except ValueError as e:
            raise ConfigurationError(f"Invalid sensor ranges: {e}") from e


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(
        default="sensor_fixtures", description="Service name for tracing"
    )
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (off if None)"
    )


class Config(BaseSettings):
    """Main configuration for a fixture run."""

    model_config = SettingsConfigDict(
        env_prefix="SENSOR_FIXTURES_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    fixture: FixtureConfig = Field(default_factory=FixtureConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    ranges: SensorRanges = Field(default_factory=SensorRanges)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def validate_for_run(self) -> SensorProfile:
        """Fail fast on anything that would break a run midway.

        Returns:
            The sensor profile the generator should use.

        Raises:
            ConfigurationError: If the target is not writable, the shell
                backend binary is missing, or the pools cannot produce
                enough unique room numbers.
        """
        profile = self.ranges.to_profile()

        if self.fixture.rooms > profile.room_number_capacity:
            raise ConfigurationError(
                f"{self.fixture.rooms} rooms requested but the building/floor/sequence "
                f"pools allow only {profile.room_number_capacity} unique room numbers"
            )

        target = self.fixture.target
        if target.exists() and target.is_dir():
            raise ConfigurationError(f"Target {target} is a directory")
        parent = target.parent
        if not parent.is_dir():
            raise ConfigurationError(f"Target directory {parent} does not exist")
        if not os.access(parent, os.W_OK):
            raise ConfigurationError(f"Target directory {parent} is not writable")
        if target.exists() and not self.fixture.clean:
            raise ConfigurationError(
                f"Target {target} already exists and clean is disabled"
            )

        if self.loader.engine_backend is Backend.CLI:
            if shutil.which(self.loader.sqlite_binary) is None:
                raise ConfigurationError(
                    f"sqlite3 shell {self.loader.sqlite_binary!r} not found on PATH"
                )

        spool_dir = self.loader.spool_dir
        if spool_dir is not None and not spool_dir.is_dir():
            raise ConfigurationError(f"Spool directory {spool_dir} does not exist")

        return profile


# Mirror the two original scripts: the shell tutorial and the quick Lua run.
PRESETS: dict[str, dict[str, dict[str, Any]]] = {
    "tutorial": {
        "fixture": {"rooms": 50, "logs_per_room": 100000},
        "loader": {"strategy": "batched", "backend": "cli", "batch_size": 100000},
    },
    "quick": {
        "fixture": {"rooms": 2, "logs_per_room": 1000},
        "loader": {"strategy": "memory", "backend": "binding"},
    },
}


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(
    preset: str | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
) -> Config:
    """Build a configuration from environment, preset and explicit overrides.

    Precedence, lowest first: defaults, ``SENSOR_FIXTURES_*`` environment,
    preset, overrides.

    Raises:
        ConfigurationError: On an unknown preset or invalid values.
    """
    try:
        data = Config().model_dump()
        if preset is not None:
            if preset not in PRESETS:
                raise ConfigurationError(
                    f"Unknown preset {preset!r}; choose from {sorted(PRESETS)}"
                )
            data = _merge(data, PRESETS[preset])
        if overrides:
            data = _merge(data, overrides)
        return Config(**data)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
