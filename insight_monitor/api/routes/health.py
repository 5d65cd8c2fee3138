"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from insight_monitor import __version__
from insight_monitor.api.dependencies import (
    get_acquisition_service,
    get_database,
    get_extraction_service,
)
from insight_monitor.api.models import ComponentHealth, HealthResponse
from insight_monitor.extraction.service import ExtractionService
from insight_monitor.social.acquisition import AcquisitionService
from insight_monitor.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    healthy = await db.health_check()
    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(
        status="healthy" if healthy else "unhealthy",
        latency_ms=round(latency_ms, 2),
    )


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health(
    db: Database = Depends(get_database),
    extraction: ExtractionService = Depends(get_extraction_service),
    acquisition: AcquisitionService = Depends(get_acquisition_service),
) -> HealthResponse:
    database = await _check_database(db)
    overall = "healthy" if database.status == "healthy" else "unhealthy"
    if overall == "healthy" and acquisition.state.value == "partially_failed":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        components={"database": database},
        pending_extractions=extraction.pending_tasks,
        fetch_state=acquisition.state.value,
    )
