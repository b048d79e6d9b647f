"""
Abstract base class for metrics collection.

Lets the resolver and stitcher report to any backend (Prometheus, StatsD, ...)
while defaulting to a collector that records nothing.
"""

from abc import ABC, abstractmethod


class MetricsCollector(ABC):
    """
    Abstract base class for metrics collection.

    Implementations must be safe to share between concurrent resolutions.
    """

    @abstractmethod
    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            metric: Metric name (e.g., 'vast.chain.resolutions.total')
            value: Amount to increment (default: 1)
            labels: Optional labels (e.g., {'error_type': 'VastFetchError'})
        """

    @abstractmethod
    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Record a histogram value.

        Args:
            metric: Metric name (e.g., 'vast.chain.depth')
            value: Value to record
            labels: Optional labels
        """

    def timing(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Record a timing metric (convenience wrapper for histogram).

        Args:
            metric: Metric name
            value: Duration in milliseconds
            labels: Optional labels
        """
        self.histogram(metric, value, labels)


class NoOpMetrics(MetricsCollector):
    """No-operation metrics collector, the default."""

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass


__all__ = ["MetricsCollector", "NoOpMetrics"]
