"""
Data models for sensor readings.
"""

from .reading import DiskTemperature, LabelKey, Reading, SensorCategory

__all__ = [
    "SensorCategory",
    "Reading",
    "LabelKey",
    "DiskTemperature",
]
