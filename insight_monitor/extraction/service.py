"""
Upload intake and document extraction.

Text-type uploads are classified inside the request. PDFs are handed
to a background task and the caller receives the document in the
``pending`` state; its status moves pending -> extracting -> extracted
(or failed) and callers re-fetch the document to observe completion.
There is no queue or worker pool: a task per upload is the only
asynchrony.
"""

import asyncio
import secrets
import time
from pathlib import Path

import structlog

from insight_monitor.extraction.classifier import PDF_EXTENSIONS, classify, normalize_extension
from insight_monitor.extraction.config import ExtractionConfig
from insight_monitor.extraction.schemas import Document
from insight_monitor.observability.metrics import get_metrics
from insight_monitor.storage.repository import BatchNotFoundError, DocumentRepository

logger = structlog.get_logger(__name__)


class UploadRejectedError(Exception):
    """An upload was refused before anything was stored."""


class UnsupportedUploadError(UploadRejectedError):
    """The declared extension is not accepted."""


class UploadTooLargeError(UploadRejectedError):
    """The payload exceeds the upload size limit."""


class ExtractionService:
    """
    Accepts uploads, stores their bytes and drives extraction.

    Args:
        repository: Document persistence.
        config: Upload limits and storage directory.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        config: ExtractionConfig | None = None,
    ) -> None:
        self._repo = repository
        self._config = config or ExtractionConfig()
        self._metrics = get_metrics()
        self._tasks: set[asyncio.Task] = set()

    @property
    def max_upload_bytes(self) -> int:
        return self._config.max_upload_bytes

    @property
    def pending_tasks(self) -> int:
        """Number of background extractions still running."""
        return len(self._tasks)

    def validate_upload(self, filename: str, size: int) -> str:
        """
        Check extension and size limits.

        Returns:
            The normalized extension

        Raises:
            UnsupportedUploadError: Extension not in the allowed set
            UploadTooLargeError: Payload above max_upload_bytes
        """
        extension = normalize_extension(Path(filename).suffix)
        allowed = self._config.allowed_extension_set
        if extension not in allowed:
            raise UnsupportedUploadError(
                f"Unsupported file type {extension or '(none)'!r}. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )
        if size > self._config.max_upload_bytes:
            raise UploadTooLargeError(
                f"File is {size} bytes; the limit is {self._config.max_upload_bytes} bytes"
            )
        return extension

    async def ingest_upload(self, batch_id: int, filename: str, data: bytes) -> Document:
        """
        Store an upload and start its extraction.

        Args:
            batch_id: Batch the document joins
            filename: Client-side filename (its extension decides handling)
            data: Raw file bytes

        Returns:
            The document; ``extracted`` for text-type files, ``pending`` for PDFs

        Raises:
            UploadRejectedError: Extension or size not accepted
            BatchNotFoundError: Batch does not exist

        A storage error after the document row is created marks the
        document ``failed`` before it propagates.
        """
        extension = self.validate_upload(filename, len(data))

        if await self._repo.get_batch(batch_id) is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")

        path = await self._store_file(data, extension)
        document = await self._repo.create_document(
            Document(
                batch_id=batch_id,
                filename=filename,
                file_type=extension,
                file_path=str(path),
            )
        )

        logger.info(
            "Document uploaded",
            document_id=document.id,
            batch_id=batch_id,
            file_type=extension,
            size=len(data),
        )

        # The row exists from here on and must not be left pending
        try:
            await self._repo.touch_batch(batch_id)
            if extension in PDF_EXTENSIONS:
                self._dispatch(document)
                return document
            return await self._classify_and_save(document, data)
        except Exception as e:
            await self._record_failure(document, e)
            raise

    async def extract_document(self, document: Document) -> Document | None:
        """
        Read a stored upload from disk, classify it and persist the outcome.

        Failures leave the document in the ``failed`` state and return None.
        """
        try:
            await self._repo.mark_extracting(document.id)
            data = await asyncio.to_thread(Path(document.file_path).read_bytes)
            return await self._classify_and_save(document, data)
        except Exception as e:
            await self._record_failure(document, e)
            return None

    async def delete_batch(self, batch_id: int) -> int:
        """
        Delete a batch with its documents, cached results and stored files.

        Returns:
            Number of stored files removed

        Raises:
            BatchNotFoundError: Batch does not exist
        """
        paths = await self._repo.delete_batch(batch_id)
        if paths is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")

        def _unlink() -> int:
            removed = 0
            for path in paths:
                try:
                    Path(path).unlink()
                    removed += 1
                except FileNotFoundError:
                    continue
                except OSError as e:
                    # Rows are already deleted at this point
                    logger.warning("Could not remove stored file", path=path, error=str(e))
            return removed

        removed = await asyncio.to_thread(_unlink)
        logger.info("Batch deleted", batch_id=batch_id, documents=len(paths), files_removed=removed)
        return removed

    async def wait_for_pending(self) -> None:
        """Wait for all dispatched extractions to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _record_failure(self, document: Document, error: Exception) -> None:
        """Move a document to ``failed``; a second storage error is only logged."""
        logger.error(
            "Document extraction failed",
            document_id=document.id,
            error=str(error),
        )
        self._metrics.extraction_failures.inc()
        try:
            await self._repo.mark_failed(document.id, str(error))
        except Exception as mark_error:
            logger.error(
                "Could not record extraction failure",
                document_id=document.id,
                error=str(mark_error),
            )

    def _dispatch(self, document: Document) -> None:
        task = asyncio.create_task(
            self.extract_document(document),
            name=f"extract_document_{document.id}",
        )
        # Hold a reference until done; the loop only keeps weak ones
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Extraction dispatched", document_id=document.id)

    async def _classify_and_save(self, document: Document, data: bytes) -> Document:
        outcome = classify(
            data,
            document.file_type,
            filename=document.filename,
            document_id=document.id,
        )
        self._metrics.classifications.labels(kind=outcome.kind).inc()

        updated = await self._repo.save_extraction(document.id, outcome)
        logger.info(
            "Document classified",
            document_id=document.id,
            kind=outcome.kind,
        )
        return updated or document

    async def _store_file(self, data: bytes, extension: str) -> Path:
        upload_dir = self._config.upload_dir
        name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}.{extension}"
        path = upload_dir / name

        def _write() -> None:
            upload_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        return path
