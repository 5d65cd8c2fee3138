"""HTTP adapter exposing uploads, analyses, summaries and social endpoints."""

from insight_monitor.api.app import create_app

__all__ = ["create_app"]
