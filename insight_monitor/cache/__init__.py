"""Result cache for batch analyses, document summaries and post analyses."""

from insight_monitor.cache.repository import ResultCache
from insight_monitor.cache.schemas import CacheMiss, DocumentSummary, MissReason, SummarySource

__all__ = ["CacheMiss", "DocumentSummary", "MissReason", "ResultCache", "SummarySource"]
