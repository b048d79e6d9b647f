"""Metric name constants for chain resolution and stitching."""


class VastMetrics:
    """Metric name constants."""

    # Chain resolution
    CHAIN_RESOLUTIONS_TOTAL = "vast.chain.resolutions.total"
    CHAIN_RESOLUTIONS_SUCCESS = "vast.chain.resolutions.success"
    CHAIN_RESOLUTIONS_FAILURE = "vast.chain.resolutions.failure"
    CHAIN_DEPTH = "vast.chain.depth"
    CHAIN_FETCH_DURATION_MS = "vast.chain.fetch.duration"

    # Stitching
    STITCH_DOCUMENTS_TOTAL = "vast.stitch.documents.total"
    STITCH_MERGED_ENTRIES = "vast.stitch.merged.entries"


class MetricLabels:
    """Standard label names for metrics."""

    ERROR_TYPE = "error_type"  # Exception class name
    SCHEME = "scheme"  # file, http, https
    ENTRY_TYPE = "entry_type"  # impression, error, tracking, click_tracking, ...


__all__ = ["VastMetrics", "MetricLabels"]
