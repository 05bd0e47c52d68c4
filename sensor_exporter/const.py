"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Sensor Exporter"
APP_VERSION = "0.1.0"

# Default values
DEFAULT_LISTEN_ADDRESS = ":9255"
DEFAULT_TELEMETRY_PATH = "/metrics"
DEFAULT_HDDTEMP_ADDRESS = "localhost:7634"
DEFAULT_HDDTEMP_TIMEOUT = 5.0
DEFAULT_LM_INTERVAL = 1.0
DEFAULT_HWMON_PATH = "/sys/class/hwmon"

# Metric naming
METRIC_NAMESPACE = "sensor"
HDDTEMP_METRIC = "sensor_hddsmart_temperature_celsius"
