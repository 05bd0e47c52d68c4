"""
Gauge caches filled by the poller and exposed on scrape.

The poller is the only writer; scrape threads only ever see copies taken
under the cache lock, so a scrape never observes a half-updated cache and
never waits for a poll cycle.
"""

import threading
from collections.abc import Iterable, Mapping

from prometheus_client.core import Metric

from ..models.reading import LabelKey, Reading, SensorCategory
from .base import MetricCollector, gauge_family


class GaugeCache:
    """Latest value per label tuple for one sensor category."""

    def __init__(self, category: SensorCategory):
        self.category = category
        self._values: dict[LabelKey, float] = {}
        self._lock = threading.Lock()

    def set(self, key: LabelKey, value: float) -> None:
        """Store a value, replacing any previous value for the same labels."""
        with self._lock:
            self._values[key] = value

    def update(self, reading: Reading) -> None:
        """Store a reading of this cache's category."""
        if reading.category is not self.category:
            raise ValueError(
                f"{reading.category.value} reading written to {self.category.value} cache"
            )
        self.set(reading.key, reading.value)

    def snapshot(self) -> dict[LabelKey, float]:
        """Copy of the current values."""
        with self._lock:
            return dict(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __repr__(self) -> str:
        return f"GaugeCache({self.category.value}, {len(self)} entries)"


def create_caches() -> dict[SensorCategory, GaugeCache]:
    """One empty cache per sensor category."""
    return {category: GaugeCache(category) for category in SensorCategory}


class CachedGaugeCollector(MetricCollector):
    """Exposes the gauge caches as sensor_lm_* metric families."""

    def __init__(self, caches: Mapping[SensorCategory, GaugeCache]):
        self.caches = caches

    def describe(self) -> Iterable[Metric]:
        for category in self.caches:
            yield gauge_family(category.metric_name, category.help, category.label_names)

    def collect(self) -> Iterable[Metric]:
        for category, cache in self.caches.items():
            values = cache.snapshot()
            if not values:
                continue
            family = gauge_family(category.metric_name, category.help, category.label_names)
            for labels, value in values.items():
                family.add_metric(list(labels), value)
            yield family

    def __repr__(self) -> str:
        return f"CachedGaugeCollector({len(self.caches)} caches)"
