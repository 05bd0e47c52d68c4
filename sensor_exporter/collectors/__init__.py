"""
Metric collectors for hwmon sensors and hddtemp.
"""

from .base import MetricCollector
from .gauges import CachedGaugeCollector, GaugeCache, create_caches
from .hddtemp import HddtempCollector
from .lm import LmSensorsPoller, classify_feature

__all__ = [
    "MetricCollector",
    "GaugeCache",
    "CachedGaugeCollector",
    "create_caches",
    "HddtempCollector",
    "LmSensorsPoller",
    "classify_feature",
]
