"""
Metrics collection for wrapper resolution and stitching.

Pluggable collectors with a zero-overhead default.

Example:
    >>> from vast_stitch.metrics import NoOpMetrics, PrometheusMetrics, VastMetrics
    >>>
    >>> metrics = NoOpMetrics()
    >>> metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_TOTAL)  # No-op
    >>>
    >>> metrics = PrometheusMetrics()
    >>> metrics.histogram(VastMetrics.CHAIN_DEPTH, 3)
"""

from .base import MetricsCollector, NoOpMetrics
from .constants import MetricLabels, VastMetrics
from .prometheus import PrometheusMetrics

__all__ = [
    "MetricsCollector",
    "NoOpMetrics",
    "PrometheusMetrics",
    "VastMetrics",
    "MetricLabels",
]
