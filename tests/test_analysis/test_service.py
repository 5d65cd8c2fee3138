"""Tests for BatchAnalysisService."""

from unittest.mock import AsyncMock

import pytest

from insight_monitor.analysis.schemas import DocumentInsight, InsightStatus
from insight_monitor.analysis.service import BatchAnalysisService
from insight_monitor.extraction.schemas import DocumentBatch
from insight_monitor.storage.repository import BatchNotFoundError

from tests.conftest import LONG_TEXT, make_document


def _mock_documents(documents):
    repo = AsyncMock()
    repo.get_batch = AsyncMock(return_value=DocumentBatch(name="Q4", id=10))
    repo.list_documents = AsyncMock(return_value=documents)
    return repo


def _mock_cache():
    cache = AsyncMock()

    async def _put(batch_id, insight):
        return insight.model_copy(update={"batch_id": batch_id})

    cache.put_analysis = AsyncMock(side_effect=_put)
    return cache


@pytest.fixture
def mock_client(analysis_config):
    client = AsyncMock()
    client.config = analysis_config
    client.analyze_documents = AsyncMock(
        return_value=DocumentInsight(summary="Strong quarter.", tickers=["NVDA"])
    )
    return client


class TestAnalyzeBatch:
    @pytest.mark.asyncio
    async def test_empty_batch_never_calls_client(self, mock_client) -> None:
        cache = _mock_cache()
        service = BatchAnalysisService(_mock_documents([]), cache, mock_client)

        insight = await service.analyze_batch(10)

        mock_client.analyze_documents.assert_not_awaited()
        assert insight.status == InsightStatus.NO_CONTENT
        assert insight.sentiment.score == 3.0
        assert insight.summary == "No documents available for analysis."
        assert insight.batch_id == 10
        cache.put_analysis.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_all_placeholders_never_calls_client(
        self, mock_client, binary_document, minimal_document
    ) -> None:
        service = BatchAnalysisService(
            _mock_documents([binary_document, minimal_document]), _mock_cache(), mock_client
        )

        insight = await service.analyze_batch(10)

        mock_client.analyze_documents.assert_not_awaited()
        assert insight.status == InsightStatus.NO_CONTENT
        assert "2 documents" in insight.summary

    @pytest.mark.asyncio
    async def test_mixed_batch_sends_prepared_text(
        self, mock_client, plain_document, binary_document
    ) -> None:
        cache = _mock_cache()
        service = BatchAnalysisService(
            _mock_documents([plain_document, binary_document]), cache, mock_client
        )

        insight = await service.analyze_batch(10)

        assert insight.tickers == ["NVDA"]
        assert insight.batch_id == 10
        text = mock_client.analyze_documents.await_args.args[0]
        assert "--- Document: q4_report.txt ---" in text
        assert "[INSUFFICIENT_DOCUMENT_CONTENT]" in text
        assert '"annual_report.pdf"' in text

    @pytest.mark.asyncio
    async def test_every_document_rendered_in_order(self, mock_client) -> None:
        documents = [
            make_document(document_id=i, filename=f"{i}.txt") for i in range(1, 4)
        ]
        service = BatchAnalysisService(_mock_documents(documents), _mock_cache(), mock_client)

        await service.analyze_batch(10)

        text = mock_client.analyze_documents.await_args.args[0]
        assert text.index("--- Document: 1.txt ---") < text.index("--- Document: 3.txt ---")
        assert text.count(LONG_TEXT) == 3

    @pytest.mark.asyncio
    async def test_failed_insight_is_cached(self, mock_client, plain_document) -> None:
        mock_client.analyze_documents.return_value = DocumentInsight.failed()
        cache = _mock_cache()
        service = BatchAnalysisService(_mock_documents([plain_document]), cache, mock_client)

        insight = await service.analyze_batch(10)

        assert insight.status == InsightStatus.FAILED
        cache.put_analysis.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_pending_documents_do_not_block(
        self, mock_client, plain_document, pending_document
    ) -> None:
        service = BatchAnalysisService(
            _mock_documents([plain_document, pending_document]), _mock_cache(), mock_client
        )

        insight = await service.analyze_batch(10)

        assert insight.status == InsightStatus.GENERATED
        text = mock_client.analyze_documents.await_args.args[0]
        assert '"deck.pdf"' in text

    @pytest.mark.asyncio
    async def test_unknown_batch(self, mock_client) -> None:
        documents = _mock_documents([])
        documents.get_batch.return_value = None
        cache = _mock_cache()
        service = BatchAnalysisService(documents, cache, mock_client)

        with pytest.raises(BatchNotFoundError):
            await service.analyze_batch(404)

        cache.put_analysis.assert_not_awaited()
