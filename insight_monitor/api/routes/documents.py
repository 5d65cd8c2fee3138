"""
Batch and document endpoints: create batches, upload files, poll extraction.
"""

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from insight_monitor.api.dependencies import get_document_repository, get_extraction_service
from insight_monitor.api.models import (
    BatchCreateRequest,
    BatchDeleteResponse,
    BatchDetailResponse,
    BatchResponse,
    BatchUpdateRequest,
    DocumentResponse,
    ErrorResponse,
)
from insight_monitor.extraction.schemas import DocumentBatch
from insight_monitor.extraction.service import ExtractionService
from insight_monitor.storage.repository import DocumentRepository

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/batches",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a document batch",
)
async def create_batch(
    body: BatchCreateRequest,
    repo: DocumentRepository = Depends(get_document_repository),
) -> BatchResponse:
    batch = await repo.create_batch(
        DocumentBatch(name=body.name, description=body.description, owner_id=body.owner_id)
    )
    logger.info("Batch created", batch_id=batch.id)
    return BatchResponse.from_batch(batch)


@router.get("/batches", response_model=list[BatchResponse], summary="List document batches")
async def list_batches(
    owner_id: int | None = Query(default=None, description="Only batches of this owner"),
    repo: DocumentRepository = Depends(get_document_repository),
) -> list[BatchResponse]:
    batches = await repo.list_batches(owner_id)
    return [BatchResponse.from_batch(b) for b in batches]


@router.get(
    "/batches/{batch_id}",
    response_model=BatchDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Batch not found"}},
    summary="Get a batch with its documents",
)
async def get_batch(
    batch_id: int,
    repo: DocumentRepository = Depends(get_document_repository),
) -> BatchDetailResponse:
    batch = await repo.get_batch(batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found")
    documents = await repo.list_documents(batch_id)
    return BatchDetailResponse(
        batch=BatchResponse.from_batch(batch),
        documents=[DocumentResponse.from_document(d) for d in documents],
    )


@router.patch(
    "/batches/{batch_id}",
    response_model=BatchResponse,
    responses={404: {"model": ErrorResponse, "description": "Batch not found"}},
    summary="Rename or re-describe a batch",
)
async def update_batch(
    batch_id: int,
    body: BatchUpdateRequest,
    repo: DocumentRepository = Depends(get_document_repository),
) -> BatchResponse:
    batch = await repo.update_batch(batch_id, name=body.name, description=body.description)
    if batch is None:
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found")
    logger.info("Batch updated", batch_id=batch_id)
    return BatchResponse.from_batch(batch)


@router.delete(
    "/batches/{batch_id}",
    response_model=BatchDeleteResponse,
    responses={404: {"model": ErrorResponse, "description": "Batch not found"}},
    summary="Delete a batch with its documents and cached results",
)
async def delete_batch(
    batch_id: int,
    service: ExtractionService = Depends(get_extraction_service),
) -> BatchDeleteResponse:
    removed = await service.delete_batch(batch_id)
    return BatchDeleteResponse(deleted=True, files_removed=removed)


@router.post(
    "/batches/{batch_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Batch not found"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Unsupported file type"},
    },
    summary="Upload a document",
    description=(
        "Text files are classified immediately. PDFs are extracted in the "
        "background; poll GET /documents/{id} until extraction_status is "
        "extracted or failed."
    ),
)
async def upload_document(
    batch_id: int,
    file: UploadFile = File(...),
    service: ExtractionService = Depends(get_extraction_service),
) -> DocumentResponse:
    filename = file.filename or "upload"
    if file.size is not None:
        service.validate_upload(filename, file.size)
    # One byte past the limit is enough for ingest_upload to reject it
    data = await file.read(service.max_upload_bytes + 1)
    document = await service.ingest_upload(batch_id, filename, data)
    return DocumentResponse.from_document(document)


@router.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
    summary="Get a document and its extraction status",
)
async def get_document(
    document_id: int,
    repo: DocumentRepository = Depends(get_document_repository),
) -> DocumentResponse:
    document = await repo.get_document(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return DocumentResponse.from_document(document)
