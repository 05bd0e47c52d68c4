"""
Sensor Exporter - Prometheus exporter for hwmon sensors and hddtemp.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
