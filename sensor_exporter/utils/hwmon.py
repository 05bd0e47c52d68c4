"""
Sensor chip access through the hwmon sysfs interface.

Reads /sys/class/hwmon/hwmon*/ the way libsensors does: one chip per hwmon
directory, one feature per <type><n>_input attribute. Values are converted
to base units (degrees Celsius, volts, amperes, watts, joules, RPM) and chips
are named "<prefix>-<bus>-<address>" with a human-readable adapter name.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from ..const import DEFAULT_HWMON_PATH
from ..errors import SensorLibraryError

# Attribute name -> (type, channel number, subfeature)
FEATURE_PATTERN = re.compile(r"^([a-z]+)(\d+)_(input|average)$")

# Divisor from sysfs units to base units
SCALES: dict[str, float] = {
    "in": 1000.0,  # millivolts
    "curr": 1000.0,  # milliamperes
    "temp": 1000.0,  # millidegrees Celsius
    "humidity": 1000.0,  # milli-percent
    "power": 1_000_000.0,  # microwatts
    "energy": 1_000_000.0,  # microjoules
    "fan": 1.0,  # RPM
}

ADAPTER_NAMES = {
    "isa": "ISA adapter",
    "pci": "PCI adapter",
    "acpi": "ACPI interface",
    "virtual": "Virtual device",
}


@dataclass
class SensorFeature:
    """One measurement channel of a chip (temp1, fan2, in0, ...)."""

    name: str
    label: str
    path: Path
    scale: float = 1.0

    def get_value(self) -> float:
        """
        Read the current value in base units.

        Raises:
            OSError: If the attribute cannot be read (sensor asleep, removed)
            ValueError: If the attribute does not hold a number
        """
        return int(self.path.read_text().strip()) / self.scale


@dataclass
class SensorChip:
    """A detected hwmon chip."""

    prefix: str
    bus: str
    address: int
    adapter_name: str
    path: Path
    _features: list[SensorFeature] | None = field(default=None, repr=False)

    @property
    def identifier(self) -> str:
        """Chip name in libsensors notation, e.g. coretemp-isa-0000."""
        if self.bus in ("isa", "pci"):
            return f"{self.prefix}-{self.bus}-{self.address:04x}"
        if self.bus.startswith("i2c-"):
            return f"{self.prefix}-{self.bus}-{self.address:02x}"
        return f"{self.prefix}-{self.bus}-{self.address:x}"

    def __str__(self) -> str:
        return self.identifier

    def get_features(self) -> list[SensorFeature]:
        """List the chip's features, sorted by type and channel number."""
        if self._features is None:
            try:
                self._features = _discover_features(self.path)
            except OSError as e:
                raise SensorLibraryError(f"cannot list features of {self}: {e}") from e
        return self._features


def _read_attr(path: Path) -> str | None:
    try:
        return path.read_text().strip()
    except OSError:
        return None


def _discover_features(attr_dir: Path) -> list[SensorFeature]:
    """Find <type><n>_input attributes (power falls back to _average)."""
    found: dict[tuple[str, int], SensorFeature] = {}

    for attr in sorted(attr_dir.iterdir()):
        match = FEATURE_PATTERN.match(attr.name)
        if not match:
            continue
        kind, number, sub = match.group(1), int(match.group(2)), match.group(3)
        if sub == "average" and kind != "power":
            continue
        key = (kind, number)
        if key in found and sub == "average":
            continue

        name = f"{kind}{number}"
        label = _read_attr(attr_dir / f"{name}_label") or name
        found[key] = SensorFeature(
            name=name,
            label=label,
            path=attr,
            scale=SCALES.get(kind, 1.0),
        )

    return [found[key] for key in sorted(found)]


def _bus_info(device: Path) -> tuple[str, int, str]:
    """
    Work out bus type, address and adapter name from a hwmon device link.

    Returns:
        Tuple of (bus, address, adapter_name)
    """
    if not device.exists():
        return "virtual", 0, ADAPTER_NAMES["virtual"]

    device = device.resolve()
    subsystem_link = device / "subsystem"
    subsystem = subsystem_link.resolve().name if subsystem_link.exists() else ""
    dev_name = device.name

    if subsystem == "pci":
        # 0000:01:00.0 -> domain:bus:slot.func
        match = re.match(r"^([0-9a-f]+):([0-9a-f]+):([0-9a-f]+)\.([0-7])$", dev_name)
        if match:
            domain, bus, slot, func = (int(g, 16) for g in match.groups())
            address = (domain << 16) + (bus << 8) + (slot << 3) + func
            return "pci", address, ADAPTER_NAMES["pci"]
        return "pci", 0, ADAPTER_NAMES["pci"]

    if subsystem == "i2c":
        # 3-004c -> adapter 3, address 0x4c
        match = re.match(r"^(\d+)-([0-9a-f]+)$", dev_name)
        if match:
            adapter_nr = int(match.group(1))
            adapter = _read_attr(device.parent / "name") or f"i2c-{adapter_nr}"
            return f"i2c-{adapter_nr}", int(match.group(2), 16), adapter
        return "i2c", 0, "i2c"

    if subsystem == "acpi":
        match = re.search(r":(\d+)$", dev_name)
        return "acpi", int(match.group(1)) if match else 0, ADAPTER_NAMES["acpi"]

    if subsystem in ("platform", "isa", ""):
        # coretemp.0, nct6775.656 -> instance/IO address after the dot
        match = re.search(r"\.(\d+)$", dev_name)
        return "isa", int(match.group(1)) if match else 0, ADAPTER_NAMES["isa"]

    return subsystem, 0, subsystem


class Hwmon:
    """
    hwmon sensor library.

    Usage:
        sensors = Hwmon()
        sensors.init()
        for chip in sensors.detected_chips():
            for feature in chip.get_features():
                print(chip, feature.label, feature.get_value())
        sensors.cleanup()
    """

    def __init__(self, root: str | Path = DEFAULT_HWMON_PATH):
        """
        Initialize sensor library.

        Args:
            root: Directory holding hwmon* entries
        """
        self.root = Path(root)
        self._initialized = False

    def init(self) -> None:
        """
        Check that the hwmon class directory is usable.

        Raises:
            SensorLibraryError: If the directory does not exist
        """
        if not self.root.is_dir():
            raise SensorLibraryError(f"hwmon directory not found: {self.root}")
        self._initialized = True

    def cleanup(self) -> None:
        self._initialized = False

    def detected_chips(self) -> list[SensorChip]:
        """
        Enumerate hwmon chips.

        Returns:
            List of chips with a readable name attribute

        Raises:
            SensorLibraryError: If the library is not initialized or the
                directory cannot be listed
        """
        if not self._initialized:
            raise SensorLibraryError("sensor library used before init()")

        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            raise SensorLibraryError(f"cannot list {self.root}: {e}") from e

        chips = []
        for hwmon_dir in entries:
            # Old drivers keep attributes next to the device instead
            attr_dir = hwmon_dir
            if not (attr_dir / "name").exists():
                attr_dir = hwmon_dir / "device"
            prefix = _read_attr(attr_dir / "name")
            if not prefix:
                continue

            bus, address, adapter = _bus_info(hwmon_dir / "device")
            chips.append(
                SensorChip(
                    prefix=prefix,
                    bus=bus,
                    address=address,
                    adapter_name=adapter,
                    path=attr_dir,
                )
            )

        return chips
