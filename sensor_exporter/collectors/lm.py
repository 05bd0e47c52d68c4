"""
Local sensor poller.

Re-reads every chip and feature of the sensor library on a fixed interval
and writes the values into the per-category gauge caches. The poller runs
as its own asyncio task and is not involved in serving scrapes.
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol

from ..const import DEFAULT_LM_INTERVAL
from ..errors import SensorLibraryError
from ..logging import get_logger
from ..models.reading import Reading, SensorCategory
from .gauges import GaugeCache

logger = get_logger("collectors.poller")

# Checked in order, first match wins
FEATURE_PREFIXES: list[tuple[str, SensorCategory]] = [
    ("fan", SensorCategory.FAN),
    ("temp", SensorCategory.TEMPERATURE),
    ("in", SensorCategory.VOLTAGE),
    ("power", SensorCategory.POWER),
]


class SensorLibrary(Protocol):
    """What the poller needs from a sensor library (see utils.hwmon.Hwmon)."""

    def init(self) -> None: ...

    def detected_chips(self) -> list[Any]: ...

    def cleanup(self) -> None: ...


def classify_feature(name: str) -> SensorCategory | None:
    """
    Map a feature name to its category by prefix.

    Args:
        name: Feature name (fan1, temp2_input, in0, ...)

    Returns:
        SensorCategory, or None for features that are not exported
    """
    for prefix, category in FEATURE_PREFIXES:
        if name.startswith(prefix):
            return category
    return None


class LmSensorsPoller:
    """
    Background poller for hwmon sensors.

    Usage:
        poller = LmSensorsPoller(Hwmon(), create_caches())
        task = asyncio.create_task(poller.run())
        ...
        poller.stop()
        await task
    """

    def __init__(
        self,
        library: SensorLibrary,
        caches: Mapping[SensorCategory, GaugeCache],
        interval: float = DEFAULT_LM_INTERVAL,
    ):
        """
        Initialize poller.

        Args:
            library: Sensor library providing chips and features
            caches: Gauge cache per category, shared with the exposer
            interval: Seconds between polls
        """
        self.library = library
        self.caches = caches
        self.interval = interval
        self.cycles = 0
        self._stop_event = asyncio.Event()

    def read_chips(self) -> list[Reading]:
        """
        Read every classified feature of every detected chip.

        A feature that cannot be read is skipped; enumeration failures
        propagate to the caller.

        Returns:
            Readings in chip and feature order
        """
        readings = []
        for chip in self.library.detected_chips():
            chip_name = str(chip)
            adaptor = chip.adapter_name
            for feature in chip.get_features():
                category = classify_feature(feature.name)
                if category is None:
                    continue
                try:
                    value = feature.get_value()
                except (OSError, ValueError) as e:
                    logger.debug(f"Skipping {chip_name}/{feature.name}: {e}")
                    continue
                readings.append(
                    Reading(
                        category=category,
                        label=feature.label,
                        chip=chip_name,
                        adaptor=adaptor,
                        value=float(value),
                    )
                )
        return readings

    def poll_once(self) -> int:
        """
        Run one poll cycle and publish the results.

        Returns:
            Number of readings written
        """
        readings = self.read_chips()
        for reading in readings:
            self.caches[reading.category].update(reading)
        self.cycles += 1
        return len(readings)

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def run(self) -> None:
        """Poll until stop() is called."""
        logger.info(f"Starting sensor poller (interval: {self.interval}s)")
        try:
            self.library.init()
        except SensorLibraryError as e:
            logger.error(f"Cannot initialize sensor library, local sensors disabled: {e}")
            return

        try:
            while not self._stop_event.is_set():
                try:
                    count = self.poll_once()
                    logger.debug(f"Poll cycle {self.cycles}: {count} readings")
                except Exception as e:
                    logger.error(f"Error reading sensors: {e}")

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self.library.cleanup()
            logger.info("Sensor poller stopped")
