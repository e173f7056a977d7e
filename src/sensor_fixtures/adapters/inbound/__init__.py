"""Inbound adapters for the fixture generator.

Exports:
    CLI:
        - main: ``sensor-fixtures`` entry point
        - build_parser: The argument parser
        - render_summary: Verification summary writer
"""

from sensor_fixtures.adapters.inbound.cli import build_parser, main, render_summary

__all__ = [
    "main",
    "build_parser",
    "render_summary",
]
