"""
Batch analysis orchestration.

Loads a batch's documents, prepares them within the character budget
and calls the analysis client only when there is real text to analyze.
Every outcome, including the short-circuit defaults, is written to the
result cache so a later GET returns what the last POST produced.
"""

import structlog

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.analysis.preparer import prepare_documents
from insight_monitor.analysis.schemas import DocumentInsight, InsightStatus
from insight_monitor.cache.repository import ResultCache
from insight_monitor.observability.metrics import get_metrics
from insight_monitor.storage.repository import BatchNotFoundError, DocumentRepository

logger = structlog.get_logger(__name__)


class BatchAnalysisService:
    """
    Generates and caches the insight for a document batch.

    Args:
        documents: Document persistence.
        cache: Result cache.
        client: Analysis client.
        config: Budget settings; defaults to the client's config.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        cache: ResultCache,
        client: AnalysisClient,
        config: AnalysisConfig | None = None,
    ) -> None:
        self._documents = documents
        self._cache = cache
        self._client = client
        self._config = config or client.config
        self._metrics = get_metrics()

    async def analyze_batch(self, batch_id: int) -> DocumentInsight:
        """
        Analyze every document in a batch and replace its cached insight.

        Raises:
            BatchNotFoundError: Unknown batch
        """
        if await self._documents.get_batch(batch_id) is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")

        documents = await self._documents.list_documents(batch_id)
        pending = sum(1 for doc in documents if doc.extraction_pending)
        if pending:
            logger.warning(
                "Analyzing batch with extraction in progress",
                batch_id=batch_id,
                pending=pending,
            )

        if not documents:
            insight = DocumentInsight.no_content()
        else:
            prepared = prepare_documents(
                [(doc.filename, doc.outcome) for doc in documents],
                max_per_document=self._config.max_per_document,
                max_total=self._config.max_total,
            )
            if prepared.analyzable:
                insight = await self._client.analyze_documents(prepared.text)
            else:
                insight = DocumentInsight.no_analyzable_content(len(documents))

        if insight.status == InsightStatus.NO_CONTENT:
            self._metrics.analysis_requests.labels(target="documents", status="no_content").inc()

        stored = await self._cache.put_analysis(batch_id, insight)
        logger.info(
            "Batch analyzed",
            batch_id=batch_id,
            documents=len(documents),
            status=stored.status.value,
        )
        return stored
