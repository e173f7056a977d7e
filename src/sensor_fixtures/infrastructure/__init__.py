"""Infrastructure layer - cross-cutting concerns."""

from sensor_fixtures.infrastructure.config import (
    Config,
    ConfigurationError,
    build_config,
    get_config,
)
from sensor_fixtures.infrastructure.logging import setup_logging, get_logger
from sensor_fixtures.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from sensor_fixtures.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "ConfigurationError",
    "build_config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
