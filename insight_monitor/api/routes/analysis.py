"""
Batch analysis and per-document summary endpoints.

POST generates and caches, GET returns the cached value, DELETE drops
it so the next POST regenerates.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from insight_monitor.analysis.schemas import DocumentInsight
from insight_monitor.analysis.service import BatchAnalysisService
from insight_monitor.api.dependencies import (
    get_batch_analysis_service,
    get_result_cache,
    get_summary_service,
)
from insight_monitor.api.models import DeleteResponse, ErrorResponse
from insight_monitor.cache.repository import ResultCache
from insight_monitor.cache.schemas import CacheMiss, DocumentSummary, MissReason
from insight_monitor.cache.summary_service import SummaryService

logger = structlog.get_logger(__name__)
router = APIRouter()


def _raise_for_miss(miss: CacheMiss, what: str) -> None:
    if miss.reason == MissReason.EXTRACTION_PENDING:
        raise HTTPException(
            status_code=409,
            detail=f"No {what} yet: document extraction is still in progress",
        )
    raise HTTPException(status_code=404, detail=f"No {what} has been generated yet")


@router.post(
    "/batches/{batch_id}/analysis",
    response_model=DocumentInsight,
    responses={404: {"model": ErrorResponse, "description": "Batch not found"}},
    summary="Generate the batch analysis",
)
async def generate_analysis(
    batch_id: int,
    service: BatchAnalysisService = Depends(get_batch_analysis_service),
) -> DocumentInsight:
    return await service.analyze_batch(batch_id)


@router.get(
    "/batches/{batch_id}/analysis",
    response_model=DocumentInsight,
    responses={
        404: {"model": ErrorResponse, "description": "Never generated"},
        409: {"model": ErrorResponse, "description": "Extraction in progress"},
    },
    summary="Get the cached batch analysis",
)
async def get_analysis(
    batch_id: int,
    cache: ResultCache = Depends(get_result_cache),
) -> DocumentInsight:
    result = await cache.get_analysis(batch_id)
    if isinstance(result, CacheMiss):
        _raise_for_miss(result, "analysis")
    return result


@router.delete(
    "/batches/{batch_id}/analysis",
    response_model=DeleteResponse,
    summary="Invalidate the cached batch analysis",
)
async def delete_analysis(
    batch_id: int,
    cache: ResultCache = Depends(get_result_cache),
) -> DeleteResponse:
    return DeleteResponse(deleted=await cache.delete_analysis(batch_id))


@router.get(
    "/documents/{document_id}/summary",
    response_model=DocumentSummary,
    responses={
        404: {"model": ErrorResponse, "description": "Never generated"},
        409: {"model": ErrorResponse, "description": "Extraction in progress"},
    },
    summary="Get the cached document summary",
)
async def get_summary(
    document_id: int,
    cache: ResultCache = Depends(get_result_cache),
) -> DocumentSummary:
    result = await cache.get_summary(document_id)
    if isinstance(result, CacheMiss):
        _raise_for_miss(result, "summary")
    return result


@router.post(
    "/documents/{document_id}/summary",
    response_model=DocumentSummary,
    responses={
        404: {"model": ErrorResponse, "description": "Document not found"},
        409: {"model": ErrorResponse, "description": "Extraction in progress"},
        413: {"model": ErrorResponse, "description": "File too large to summarize"},
    },
    summary="Summarize a document",
    description="Returns the cached summary unless refresh=true.",
)
async def create_summary(
    document_id: int,
    refresh: bool = Query(default=False, description="Regenerate even if cached"),
    service: SummaryService = Depends(get_summary_service),
) -> DocumentSummary:
    return await service.summarize(document_id, refresh=refresh)


@router.delete(
    "/documents/{document_id}/summary",
    response_model=DeleteResponse,
    summary="Invalidate the cached document summary",
)
async def delete_summary(
    document_id: int,
    cache: ResultCache = Depends(get_result_cache),
) -> DeleteResponse:
    return DeleteResponse(deleted=await cache.delete_summary(document_id))
