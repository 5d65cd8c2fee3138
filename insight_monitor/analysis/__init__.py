"""Language-model analysis of document batches and social posts.

Components:
- prepare_documents: bounded prompt body from classified documents
- AnalysisClient: OpenAI wrapper returning normalized insights
- BatchAnalysisService (``insight_monitor.analysis.service``): prepare,
  analyze and cache a batch
"""

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.analysis.preparer import PreparedBatch, PreparedDocument, prepare_documents
from insight_monitor.analysis.schemas import DocumentInsight, InsightStatus, PostInsight, Sentiment

__all__ = [
    "AnalysisClient",
    "AnalysisConfig",
    "DocumentInsight",
    "InsightStatus",
    "PostInsight",
    "PreparedBatch",
    "PreparedDocument",
    "Sentiment",
    "prepare_documents",
]
