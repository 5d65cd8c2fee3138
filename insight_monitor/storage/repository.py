"""
Repository for document batches and uploaded documents.

Owns the ``document_batches`` and ``documents`` tables. Extraction
results are written with a single UPDATE that sets text, kind,
metadata and status together, so a reader never observes a document
whose text is half written or whose status disagrees with its text.
"""

import json
import logging
from typing import Any

from insight_monitor.extraction.schemas import (
    ClassificationOutcome,
    Document,
    DocumentBatch,
    ExtractionStatus,
    outcome_from_record,
    outcome_to_record,
)
from insight_monitor.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)


class BatchNotFoundError(Exception):
    """The requested batch does not exist."""


class DocumentNotFoundError(Exception):
    """The requested document does not exist."""


class DocumentRepository:
    """
    Persistence for DocumentBatch and Document rows.

    Tables:
        - document_batches: named collections owned by a user id
        - documents: uploaded files with extraction state
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_tables(self) -> None:
        """Create batch and document tables if they don't exist."""
        create_sql = """
        CREATE TABLE IF NOT EXISTS document_batches (
            id          SERIAL PRIMARY KEY,
            name        TEXT NOT NULL,
            description TEXT,
            owner_id    INTEGER,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS documents (
            id                  SERIAL PRIMARY KEY,
            batch_id            INTEGER NOT NULL REFERENCES document_batches(id) ON DELETE CASCADE,
            filename            TEXT NOT NULL,
            file_type           TEXT NOT NULL,
            file_path           TEXT NOT NULL,
            extracted_text      TEXT,
            extraction_status   TEXT NOT NULL DEFAULT 'pending'
                CHECK (extraction_status IN ('pending', 'extracting', 'extracted', 'failed')),
            extraction_kind     TEXT,
            extraction_metadata JSONB,
            extraction_error    TEXT,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE INDEX IF NOT EXISTS idx_documents_batch_id
            ON documents(batch_id);
        CREATE INDEX IF NOT EXISTS idx_documents_pending
            ON documents(batch_id)
            WHERE extraction_status IN ('pending', 'extracting');
        """
        await self._db.execute(create_sql)
        logger.info("Document tables created/verified")

    # ── Batches ──────────────────────────────────────────

    async def create_batch(self, batch: DocumentBatch) -> DocumentBatch:
        """Insert a batch and return it with its assigned id."""
        sql = """
            INSERT INTO document_batches (name, description, owner_id, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            batch.name,
            batch.description,
            batch.owner_id,
            batch.created_at,
            batch.updated_at,
        )
        return _row_to_batch(row)

    async def get_batch(self, batch_id: int) -> DocumentBatch | None:
        row = await self._db.fetchrow(
            "SELECT * FROM document_batches WHERE id = $1", batch_id
        )
        return _row_to_batch(row) if row is not None else None

    async def list_batches(self, owner_id: int | None = None) -> list[DocumentBatch]:
        """Batches, most recently updated first, optionally for one owner."""
        if owner_id is None:
            rows = await self._db.fetch(
                "SELECT * FROM document_batches ORDER BY updated_at DESC, id DESC"
            )
        else:
            rows = await self._db.fetch(
                "SELECT * FROM document_batches WHERE owner_id = $1 "
                "ORDER BY updated_at DESC, id DESC",
                owner_id,
            )
        return [_row_to_batch(row) for row in rows]

    async def update_batch(
        self,
        batch_id: int,
        name: str | None = None,
        description: str | None = None,
    ) -> DocumentBatch | None:
        """
        Rename or re-describe a batch. Fields left as None are kept.

        Returns:
            The updated batch, or None if it does not exist
        """
        sql = """
            UPDATE document_batches
            SET name = COALESCE($2, name),
                description = COALESCE($3, description),
                updated_at = NOW()
            WHERE id = $1
            RETURNING *
        """
        row = await self._db.fetchrow(sql, batch_id, name, description)
        return _row_to_batch(row) if row is not None else None

    async def delete_batch(self, batch_id: int) -> list[str] | None:
        """
        Delete a batch. Its documents and cached results go with it
        through ON DELETE CASCADE.

        Returns:
            Stored file paths of the removed documents, or None if the
            batch does not exist
        """
        async with self._db.transaction() as conn:
            rows = await conn.fetch(
                "SELECT file_path FROM documents WHERE batch_id = $1", batch_id
            )
            status = await conn.execute(
                "DELETE FROM document_batches WHERE id = $1", batch_id
            )
        if affected_rows(status) == 0:
            return None
        return [row["file_path"] for row in rows]

    async def touch_batch(self, batch_id: int) -> None:
        """Bump updated_at, e.g. after a document was added."""
        await self._db.execute(
            "UPDATE document_batches SET updated_at = NOW() WHERE id = $1", batch_id
        )

    # ── Documents ────────────────────────────────────────

    async def create_document(self, document: Document) -> Document:
        """Insert a document in the pending state."""
        sql = """
            INSERT INTO documents (
                batch_id, filename, file_type, file_path,
                extraction_status, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            document.batch_id,
            document.filename,
            document.file_type,
            document.file_path,
            ExtractionStatus.PENDING.value,
            document.created_at,
        )
        return _row_to_document(row)

    async def get_document(self, document_id: int) -> Document | None:
        row = await self._db.fetchrow("SELECT * FROM documents WHERE id = $1", document_id)
        return _row_to_document(row) if row is not None else None

    async def list_documents(self, batch_id: int) -> list[Document]:
        """Documents of a batch in upload order."""
        rows = await self._db.fetch(
            "SELECT * FROM documents WHERE batch_id = $1 ORDER BY created_at, id",
            batch_id,
        )
        return [_row_to_document(row) for row in rows]

    async def mark_extracting(self, document_id: int) -> None:
        await self._db.execute(
            "UPDATE documents SET extraction_status = $2 WHERE id = $1",
            document_id,
            ExtractionStatus.EXTRACTING.value,
        )

    async def save_extraction(
        self,
        document_id: int,
        outcome: ClassificationOutcome,
    ) -> Document | None:
        """
        Store a classification outcome and mark the document extracted.

        Returns:
            The updated document, or None if it no longer exists
        """
        kind, text, metadata = outcome_to_record(outcome)
        sql = """
            UPDATE documents
            SET extracted_text = $2,
                extraction_kind = $3,
                extraction_metadata = $4,
                extraction_status = $5,
                extraction_error = NULL
            WHERE id = $1
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            document_id,
            text,
            kind,
            json.dumps(metadata),
            ExtractionStatus.EXTRACTED.value,
        )
        return _row_to_document(row) if row is not None else None

    async def mark_failed(self, document_id: int, error: str) -> None:
        await self._db.execute(
            "UPDATE documents SET extraction_status = $2, extraction_error = $3 WHERE id = $1",
            document_id,
            ExtractionStatus.FAILED.value,
            error,
        )


def _row_to_batch(row: Any) -> DocumentBatch:
    """Convert an asyncpg Record to a DocumentBatch."""
    return DocumentBatch(
        id=row["id"],
        name=row["name"],
        description=row.get("description"),
        owner_id=row.get("owner_id"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_document(row: Any) -> Document:
    """Convert an asyncpg Record to a Document, rebuilding its outcome."""
    metadata = row.get("extraction_metadata")
    if isinstance(metadata, str):
        metadata = json.loads(metadata)

    return Document(
        id=row["id"],
        batch_id=row["batch_id"],
        filename=row["filename"],
        file_type=row["file_type"],
        file_path=row["file_path"],
        extracted_text=row.get("extracted_text"),
        extraction_status=ExtractionStatus(row["extraction_status"]),
        outcome=outcome_from_record(
            row.get("extraction_kind"), row.get("extracted_text"), metadata
        ),
        extraction_error=row.get("extraction_error"),
        created_at=row["created_at"],
    )
