"""
Sensor and protocol access helpers.
"""

from .hddtemp import parse_hddtemp, parse_hddtemp_item
from .hwmon import Hwmon, SensorChip, SensorFeature

__all__ = [
    "parse_hddtemp",
    "parse_hddtemp_item",
    "Hwmon",
    "SensorChip",
    "SensorFeature",
]
