"""Tests for per-document summaries."""

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.cache.schemas import CacheMiss, DocumentSummary, MissReason, SummarySource
from insight_monitor.cache.summary_service import (
    DocumentTooLargeError,
    ExtractionPendingError,
    SummaryService,
    heuristic_summary,
    title_from_filename,
)
from insight_monitor.extraction.schemas import ExtractionStatus, UnsupportedType, Provenance
from insight_monitor.storage.repository import DocumentNotFoundError

from tests.conftest import LONG_TEXT, make_document


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig(openai_api_key="test-key", multimodal_max_bytes=100)


@pytest.fixture
def documents():
    repo = AsyncMock()
    repo.get_document = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def cache():
    cache = AsyncMock()
    cache.get_summary = AsyncMock(return_value=CacheMiss(MissReason.NEVER_REQUESTED))
    cache.put_summary = AsyncMock(side_effect=lambda summary: summary)
    return cache


@pytest.fixture
def client():
    client = AsyncMock()
    client.summarize_text = AsyncMock(return_value="Text summary.")
    client.summarize_file = AsyncMock(return_value="File summary.")
    return client


@pytest.fixture
def service(documents, cache, client, config):
    return SummaryService(documents, cache, client, config)


class TestTitles:
    def test_separators_become_spaces(self):
        assert title_from_filename("q4_earnings-call.notes.pdf") == "q4 earnings call notes"

    def test_leading_timestamp_dropped(self):
        assert title_from_filename("1738750000000-annual_report.pdf") == "annual report"

    def test_heuristic_names_reason(self, binary_document, minimal_document):
        assert "binary PDF data" in heuristic_summary(binary_document)
        assert "only 2 words" in heuristic_summary(minimal_document)
        assert '"annual report" is a PDF document' in heuristic_summary(binary_document)

    def test_heuristic_for_unsupported(self):
        outcome = UnsupportedType(
            extension="docx", message="nope", provenance=Provenance(filename="memo.docx")
        )
        document = make_document(filename="memo.docx", outcome=outcome)
        assert ".docx files are not supported" in heuristic_summary(document)


class TestSummarize:
    @pytest.mark.asyncio
    async def test_unknown_document(self, service):
        with pytest.raises(DocumentNotFoundError):
            await service.summarize(99)

    @pytest.mark.asyncio
    async def test_cached_summary_returned(self, service, documents, cache, client, plain_document):
        documents.get_document.return_value = plain_document
        cached = DocumentSummary(document_id=1, summary="Cached.", source=SummarySource.TEXT_MODEL)
        cache.get_summary.return_value = cached

        assert await service.summarize(1) is cached
        client.summarize_text.assert_not_awaited()
        cache.put_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_ignores_cache(self, service, documents, cache, client, plain_document):
        documents.get_document.return_value = plain_document
        cache.get_summary.return_value = DocumentSummary(
            document_id=1, summary="Old.", source=SummarySource.TEXT_MODEL
        )

        summary = await service.summarize(1, refresh=True)

        assert summary.summary == "Text summary."
        cache.get_summary.assert_not_awaited()
        client.summarize_text.assert_awaited_once_with("q4_report.txt", LONG_TEXT)

    @pytest.mark.asyncio
    async def test_pending_extraction_raises(self, service, documents, client, pending_document):
        documents.get_document.return_value = pending_document

        with pytest.raises(ExtractionPendingError):
            await service.summarize(4)
        client.summarize_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_text_model_failure_falls_back(self, service, documents, client, plain_document):
        documents.get_document.return_value = plain_document
        client.summarize_text.return_value = None

        summary = await service.summarize(1)

        assert summary.source == SummarySource.HEURISTIC
        assert "q4 report" in summary.summary

    @pytest.mark.asyncio
    async def test_binary_goes_multimodal(self, service, documents, client, binary_document, tmp_path):
        path = tmp_path / "annual_report.pdf"
        path.write_bytes(b"%PDF-1.7 small")
        documents.get_document.return_value = replace(binary_document, file_path=str(path))

        summary = await service.summarize(2)

        assert summary.source == SummarySource.MULTIMODAL_MODEL
        client.summarize_file.assert_awaited_once_with("annual_report.pdf", b"%PDF-1.7 small")

    @pytest.mark.asyncio
    async def test_binary_too_large_raises_before_call(
        self, service, documents, cache, client, binary_document, tmp_path
    ):
        path = tmp_path / "annual_report.pdf"
        path.write_bytes(b"x" * 101)
        documents.get_document.return_value = replace(binary_document, file_path=str(path))

        with pytest.raises(DocumentTooLargeError):
            await service.summarize(2)
        client.summarize_file.assert_not_awaited()
        cache.put_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_multimodal_failure_falls_back(
        self, service, documents, client, binary_document, tmp_path
    ):
        path = tmp_path / "annual_report.pdf"
        path.write_bytes(b"%PDF")
        documents.get_document.return_value = replace(binary_document, file_path=str(path))
        client.summarize_file.return_value = None

        summary = await service.summarize(2)

        assert summary.source == SummarySource.HEURISTIC
        assert "binary PDF data" in summary.summary

    @pytest.mark.asyncio
    async def test_missing_stored_file_falls_back(self, service, documents, client, binary_document):
        documents.get_document.return_value = replace(binary_document, file_path="/nonexistent/x.pdf")

        summary = await service.summarize(2)

        assert summary.source == SummarySource.HEURISTIC
        client.summarize_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_minimal_text_uses_heuristic(self, service, documents, client, minimal_document):
        documents.get_document.return_value = minimal_document

        summary = await service.summarize(3)

        assert summary.source == SummarySource.HEURISTIC
        client.summarize_text.assert_not_awaited()
        client.summarize_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_extraction_uses_heuristic(self, service, documents, client):
        documents.get_document.return_value = make_document(
            document_id=5, filename="broken.pdf", status=ExtractionStatus.FAILED
        )

        summary = await service.summarize(5)

        assert "text extraction failed" in summary.summary
        client.summarize_file.assert_not_awaited()
