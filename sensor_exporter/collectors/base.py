"""
Base collector interface for metric exposition.

Every collector registered with the Prometheus registry implements
MetricCollector: describe() announces the metric families up front and
collect() is invoked synchronously on every scrape.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from prometheus_client.core import GaugeMetricFamily, Metric


class MetricCollector(ABC):
    """
    Abstract base class for scrape-time collectors.

    Subclasses must not raise from collect(): a failing source yields fewer
    samples instead of failing the whole scrape.
    """

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """
        Describe the metric families this collector produces.

        Returns:
            Metric families without samples
        """
        pass

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """
        Collect current samples.

        Returns:
            Metric families with samples
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def gauge_family(name: str, documentation: str, labels: list[str]) -> GaugeMetricFamily:
    """Create an empty gauge family with the given label names."""
    return GaugeMetricFamily(name, documentation, labels=labels)
