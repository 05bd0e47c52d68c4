"""
Sensor reading models.

A Reading is one sample of an hwmon feature, a DiskTemperature is one drive
reported by hddtemp. Both are immutable; a newer sample replaces an older one
instead of being merged into it.
"""

from dataclasses import dataclass
from enum import Enum

from ..const import METRIC_NAMESPACE

# (label, chip, adaptor)
LabelKey = tuple[str, str, str]


class SensorCategory(Enum):
    """Categories of hwmon features exported as gauges."""
    FAN = "fan"
    VOLTAGE = "voltage"
    POWER = "power"
    TEMPERATURE = "temperature"

    @property
    def metric_name(self) -> str:
        """Full Prometheus metric name for this category."""
        suffix = {
            SensorCategory.FAN: "fan_speed_rpm",
            SensorCategory.VOLTAGE: "voltage_volts",
            SensorCategory.POWER: "power_watts",
            SensorCategory.TEMPERATURE: "temperature_celsius",
        }[self]
        return f"{METRIC_NAMESPACE}_lm_{suffix}"

    @property
    def type_label(self) -> str:
        """Name of the label holding the feature label (fantype, intype, ...)."""
        return {
            SensorCategory.FAN: "fantype",
            SensorCategory.VOLTAGE: "intype",
            SensorCategory.POWER: "powertype",
            SensorCategory.TEMPERATURE: "temptype",
        }[self]

    @property
    def help(self) -> str:
        return {
            SensorCategory.FAN: "fan speed (rotations per minute).",
            SensorCategory.VOLTAGE: "voltage in volts",
            SensorCategory.POWER: "power in watts",
            SensorCategory.TEMPERATURE: "temperature in celsius",
        }[self]

    @property
    def label_names(self) -> list[str]:
        return [self.type_label, "chip", "adaptor"]


@dataclass(frozen=True)
class Reading:
    """One sampled hwmon feature value."""

    category: SensorCategory
    label: str
    chip: str
    adaptor: str
    value: float

    @property
    def key(self) -> LabelKey:
        """Label tuple identifying this reading's gauge."""
        return (self.label, self.chip, self.adaptor)


@dataclass(frozen=True)
class DiskTemperature:
    """Drive temperature as reported by hddtemp."""

    device: str
    id: str
    celsius: float
