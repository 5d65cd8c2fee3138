"""Observability layer - structured logging and Prometheus metrics."""

from insight_monitor.observability.logging import setup_logging
from insight_monitor.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
