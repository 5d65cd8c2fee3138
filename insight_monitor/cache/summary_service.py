"""
Per-document summaries with escalation by classification outcome.

PlainText goes to the text model. BinaryContent is sent as a file to
the multimodal model, after a size check that runs before any call.
Everything else, and every model failure, falls back to a heuristic
summary built from the filename.
"""

import asyncio
import re
from pathlib import Path

import structlog

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.cache.repository import ResultCache
from insight_monitor.cache.schemas import DocumentSummary, SummarySource
from insight_monitor.extraction.schemas import (
    BinaryContent,
    Document,
    ExtractionStatus,
    MinimalText,
    PlainText,
    UnsupportedType,
)
from insight_monitor.storage.repository import DocumentNotFoundError, DocumentRepository

logger = structlog.get_logger(__name__)

_TITLE_SEPARATORS = re.compile(r"[_\-.]+")
_LEADING_TIMESTAMP = re.compile(r"^\d{10,}\s*")


class ExtractionPendingError(Exception):
    """The document's text is still being extracted."""


class DocumentTooLargeError(Exception):
    """The raw file exceeds the multimodal size ceiling."""


def title_from_filename(filename: str) -> str:
    """Readable title from a filename: extension dropped, separators turned into spaces."""
    stem = Path(filename).stem or filename
    title = _TITLE_SEPARATORS.sub(" ", stem)
    title = _LEADING_TIMESTAMP.sub("", title)
    title = " ".join(title.split())
    return title or filename


def heuristic_summary(document: Document) -> str:
    """Summary built without reading the content, naming why content was unavailable."""
    title = title_from_filename(document.filename)
    outcome = document.outcome

    if document.extraction_status == ExtractionStatus.FAILED:
        reason = "text extraction failed for this file"
    elif isinstance(outcome, BinaryContent):
        reason = "its pages are stored as binary PDF data that could not be read as text"
    elif isinstance(outcome, MinimalText):
        reason = f"only {outcome.word_count} words of text could be extracted from it"
    elif isinstance(outcome, UnsupportedType):
        reason = f".{outcome.extension} files are not supported for text extraction"
    else:
        reason = "the summarization service could not process it"

    return (
        f'"{title}" is a {document.file_type.upper()} document. '
        f"A content summary is not available because {reason}. "
        f"Judging by its title, it concerns {title}."
    )


class SummaryService:
    """
    Produces and caches one summary per document.

    Args:
        documents: Document persistence.
        cache: Result cache the summaries are stored in.
        client: Analysis client.
        config: Size limits; defaults to the client's config.
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

    async def summarize(self, document_id: int, *, refresh: bool = False) -> DocumentSummary:
        """
        Return the document's summary, generating it when not cached.

        Args:
            document_id: Document to summarize
            refresh: Ignore any cached summary and regenerate

        Raises:
            DocumentNotFoundError: Unknown document
            ExtractionPendingError: Extraction has not finished yet
            DocumentTooLargeError: Binary file above the multimodal ceiling
        """
        document = await self._documents.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        if not refresh:
            cached = await self._cache.get_summary(document_id)
            if isinstance(cached, DocumentSummary):
                return cached

        if document.extraction_pending:
            raise ExtractionPendingError(
                f"Document {document_id} is still being extracted ({document.extraction_status.value})"
            )

        text, source = await self._generate(document)
        summary = await self._cache.put_summary(
            DocumentSummary(document_id=document_id, summary=text, source=source)
        )
        logger.info(
            "Document summarized",
            document_id=document_id,
            source=source.value,
            refresh=refresh,
        )
        return summary

    async def _generate(self, document: Document) -> tuple[str, SummarySource]:
        outcome = document.outcome

        if document.extraction_status == ExtractionStatus.EXTRACTED:
            if isinstance(outcome, BinaryContent):
                text = await self._summarize_binary(document)
                if text:
                    return text, SummarySource.MULTIMODAL_MODEL
            elif isinstance(outcome, PlainText):
                text = await self._client.summarize_text(document.filename, outcome.text)
                if text:
                    return text, SummarySource.TEXT_MODEL

        return heuristic_summary(document), SummarySource.HEURISTIC

    async def _summarize_binary(self, document: Document) -> str | None:
        path = Path(document.file_path)
        try:
            size = (await asyncio.to_thread(path.stat)).st_size
        except OSError as e:
            logger.warning("Stored file unavailable", document_id=document.id, error=str(e))
            return None

        limit = self._config.multimodal_max_bytes
        if size > limit:
            raise DocumentTooLargeError(
                f"{document.filename} is {size} bytes; files above {limit} bytes "
                "cannot be summarized from their raw content"
            )

        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning("Stored file unreadable", document_id=document.id, error=str(e))
            return None
        return await self._client.summarize_file(document.filename, data)
