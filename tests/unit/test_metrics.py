"""Unit tests for metrics module."""

import pytest
from prometheus_client import CollectorRegistry

from vast_stitch.metrics import (
    MetricLabels,
    MetricsCollector,
    NoOpMetrics,
    PrometheusMetrics,
    VastMetrics,
)


class TestMetricsCollector:
    """Test MetricsCollector abstract base class."""

    def test_is_abstract(self):
        """Test that MetricsCollector cannot be instantiated."""
        with pytest.raises(TypeError):
            MetricsCollector()  # type: ignore


class TestNoOpMetrics:
    """Test NoOpMetrics implementation."""

    def test_noop_calls(self):
        metrics = NoOpMetrics()

        # Should not raise any exceptions
        metrics.increment("test.metric")
        metrics.increment("test.metric", value=5, labels={"key": "value"})
        metrics.histogram("test.metric", 123.45)
        metrics.timing("test.metric", 123.45, labels={"key": "value"})

    def test_is_instance_of_metrics_collector(self):
        assert isinstance(NoOpMetrics(), MetricsCollector)


class TestPrometheusMetrics:
    """Test PrometheusMetrics implementation."""

    @pytest.fixture
    def registry(self) -> CollectorRegistry:
        return CollectorRegistry()

    def test_counter(self, registry):
        metrics = PrometheusMetrics(registry=registry)
        metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_TOTAL)
        metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_TOTAL, value=2)

        assert registry.get_sample_value("vast_chain_resolutions_total") == 3

    def test_counter_with_labels(self, registry):
        metrics = PrometheusMetrics(registry=registry)
        labels = {MetricLabels.ERROR_TYPE: "VastFetchError"}
        metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_FAILURE, labels=labels)

        assert registry.get_sample_value("vast_chain_resolutions_failure_total", labels) == 1

    def test_histogram(self, registry):
        metrics = PrometheusMetrics(registry=registry)
        metrics.histogram(VastMetrics.CHAIN_DEPTH, 2)
        metrics.histogram(VastMetrics.CHAIN_DEPTH, 3)

        assert registry.get_sample_value("vast_chain_depth_count") == 2
        assert registry.get_sample_value("vast_chain_depth_sum") == 5

    def test_timing_uses_histogram(self, registry):
        metrics = PrometheusMetrics(registry=registry)
        metrics.timing(VastMetrics.CHAIN_FETCH_DURATION_MS, 12.5, labels={MetricLabels.SCHEME: "https"})

        assert registry.get_sample_value("vast_chain_fetch_duration_count", {"scheme": "https"}) == 1

    def test_sanitize_metric_name(self, registry):
        metrics = PrometheusMetrics(registry=registry)
        assert metrics._sanitize_metric_name("vast.chain-depth") == "vast_chain_depth"

    def test_default_registry(self):
        from prometheus_client import REGISTRY

        assert PrometheusMetrics().registry is REGISTRY
