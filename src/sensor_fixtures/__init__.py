"""
Sensor Fixtures - synthetic SQLite fixture generator

Provisions a rooms/sensor_logs schema, fills it with randomly-valued sensor
readings at a configurable scale through one of several loading strategies,
builds the demonstration indexes and prints a verification summary.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
