"""
Prometheus metrics collector implementation.

Exposes resolver and stitcher metrics through prometheus_client.
"""

from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from .base import MetricsCollector


class PrometheusMetrics(MetricsCollector):
    """
    Prometheus metrics collector.

    Counters and histograms are created lazily on first use and cached by name.

    Example:
        >>> from prometheus_client import CollectorRegistry
        >>> metrics = PrometheusMetrics(registry=CollectorRegistry())
        >>> metrics.increment('vast.chain.resolutions.total')
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize Prometheus metrics collector.

        Args:
            registry: Optional CollectorRegistry. If None, uses the default REGISTRY.
        """
        self._registry = registry or REGISTRY

        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def _sanitize_metric_name(self, metric: str) -> str:
        """Convert dots and dashes to underscores for Prometheus naming."""
        return metric.replace(".", "_").replace("-", "_")

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        metric_name = self._sanitize_metric_name(metric)
        labels = labels or {}

        if metric_name not in self._counters:
            self._counters[metric_name] = Counter(
                metric_name,
                f"Counter for {metric}",
                list(labels.keys()),
                registry=self._registry,
            )

        if labels:
            self._counters[metric_name].labels(**labels).inc(value)
        else:
            self._counters[metric_name].inc(value)

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        metric_name = self._sanitize_metric_name(metric)
        labels = labels or {}

        if metric_name not in self._histograms:
            self._histograms[metric_name] = Histogram(
                metric_name,
                f"Histogram for {metric}",
                list(labels.keys()),
                registry=self._registry,
            )

        if labels:
            self._histograms[metric_name].labels(**labels).observe(value)
        else:
            self._histograms[metric_name].observe(value)


__all__ = ["PrometheusMetrics"]
