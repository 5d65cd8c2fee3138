"""
Prometheus metrics for the insight pipeline.

Covers the four places where degraded behavior hides behind a
successful-looking response: classification outcomes, analysis
requests that fell back to defaults, fetch cycles that partially
failed, and synthetic posts written in degraded mode.
"""

import logging

from prometheus_client import Counter, Histogram, start_http_server

from insight_monitor.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for LLM round trips (in seconds)
ANALYSIS_LATENCY_BUCKETS = (0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0)


class MetricsCollector:
    """
    Prometheus metrics collector.

    Usage:
        metrics = get_metrics()
        metrics.classifications.labels(kind="plain_text").inc()
        metrics.analysis_latency.labels(target="documents").observe(3.2)
    """

    def __init__(self):
        self.classifications = Counter(
            "insight_monitor_classifications_total",
            "Extraction classifier outcomes",
            ["kind"],  # plain_text, binary_content, minimal_text, unsupported_type
        )

        self.extraction_failures = Counter(
            "insight_monitor_extraction_failures_total",
            "Background extractions that ended in the failed state",
        )

        self.analysis_requests = Counter(
            "insight_monitor_analysis_requests_total",
            "Analysis results produced, by target and status",
            ["target", "status"],  # target: documents, posts, summary, file_summary
        )

        self.analysis_latency = Histogram(
            "insight_monitor_analysis_latency_seconds",
            "Round trip time to the analysis service",
            ["target"],
            buckets=ANALYSIS_LATENCY_BUCKETS,
        )

        self.fetch_cycles = Counter(
            "insight_monitor_fetch_cycles_total",
            "Social fetch cycles by trigger and final state",
            ["trigger", "state"],
        )

        self.posts_stored = Counter(
            "insight_monitor_posts_stored_total",
            "New social posts persisted (duplicates excluded)",
        )

        self.synthetic_posts = Counter(
            "insight_monitor_synthetic_posts_total",
            "Sample posts written by the degraded-mode synthetic source",
        )

        self._server_started = False

    def start_server(self, port: int | None = None) -> None:
        """Expose metrics over HTTP for Prometheus scraping."""
        if self._server_started:
            return
        port = port or get_settings().metrics_port
        start_http_server(port)
        self._server_started = True
        logger.info(f"Metrics server started on port {port}")


_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
