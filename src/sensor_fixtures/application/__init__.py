"""Application layer for the fixture generator.

The application layer orchestrates the domain and the engine sessions to
carry out a fixture run.

Exports:
    Loaders:
        - RowAtATimeLoader, BatchedLoader, BulkCsvLoader, VolatileBuildLoader
        - create_loader: Select a loader by strategy
    IndexBuilder: Post-load index construction and ANALYZE
    Verifier: Read-only checks and demonstration queries
    Pipeline:
        - FixturePipeline: Main entry point for a run
        - PipelineResult: What a completed run produced
"""

from sensor_fixtures.application.index_builder import IndexBuilder
from sensor_fixtures.application.loader import (
    BatchedLoader,
    BulkCsvLoader,
    RowAtATimeLoader,
    VolatileBuildLoader,
    create_loader,
)
from sensor_fixtures.application.pipeline import FixturePipeline, PipelineResult
from sensor_fixtures.application.verifier import Verifier

__all__ = [
    "RowAtATimeLoader",
    "BatchedLoader",
    "BulkCsvLoader",
    "VolatileBuildLoader",
    "create_loader",
    "IndexBuilder",
    "Verifier",
    "FixturePipeline",
    "PipelineResult",
]
