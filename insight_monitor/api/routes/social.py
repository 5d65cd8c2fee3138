"""
Social endpoints: tracked accounts, stored posts, account analysis and fetch cycles.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from insight_monitor.analysis.schemas import PostInsight
from insight_monitor.api.dependencies import (
    get_acquisition_service,
    get_fetch_scheduler,
    get_post_analysis_service,
    get_result_cache,
)
from insight_monitor.api.models import (
    AccountCreateRequest,
    AccountResponse,
    CycleReportResponse,
    DeleteResponse,
    ErrorResponse,
    FetchStatusResponse,
    PostPageResponse,
)
from insight_monitor.cache.repository import ResultCache
from insight_monitor.cache.schemas import CacheMiss
from insight_monitor.config.social_accounts import normalize_handle
from insight_monitor.social.acquisition import AcquisitionService
from insight_monitor.social.analysis import PostAnalysisService
from insight_monitor.social.scheduler import FetchScheduler

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/social")


@router.get("/accounts", response_model=list[AccountResponse], summary="List tracked accounts")
async def list_accounts(
    service: PostAnalysisService = Depends(get_post_analysis_service),
) -> list[AccountResponse]:
    return [AccountResponse.from_account(a) for a in await service.list_accounts()]


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse, "description": "Invalid handle"}},
    summary="Track an account",
)
async def track_account(
    body: AccountCreateRequest,
    service: PostAnalysisService = Depends(get_post_analysis_service),
) -> AccountResponse:
    try:
        account = await service.track_account(body.handle, body.display_name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return AccountResponse.from_account(account)


@router.delete(
    "/accounts/{handle}",
    response_model=DeleteResponse,
    summary="Stop tracking an account",
)
async def untrack_account(
    handle: str,
    service: PostAnalysisService = Depends(get_post_analysis_service),
) -> DeleteResponse:
    return DeleteResponse(deleted=await service.untrack_account(handle))


@router.get("/posts", response_model=PostPageResponse, summary="List stored posts")
async def list_posts(
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
    service: PostAnalysisService = Depends(get_post_analysis_service),
) -> PostPageResponse:
    return PostPageResponse.from_page(await service.list_posts(page=page, per_page=per_page))


@router.post(
    "/accounts/{handle}/analysis",
    response_model=PostInsight,
    responses={404: {"model": ErrorResponse, "description": "Unknown account"}},
    summary="Analyze an account's recent posts",
)
async def analyze_account(
    handle: str,
    service: PostAnalysisService = Depends(get_post_analysis_service),
) -> PostInsight:
    return await service.analyze_account(handle)


@router.get(
    "/accounts/{handle}/analysis",
    response_model=PostInsight,
    responses={404: {"model": ErrorResponse, "description": "Never generated"}},
    summary="Get the cached account analysis",
)
async def get_account_analysis(
    handle: str,
    cache: ResultCache = Depends(get_result_cache),
) -> PostInsight:
    result = await cache.get_post_analysis(normalize_handle(handle))
    if isinstance(result, CacheMiss):
        raise HTTPException(status_code=404, detail=f"No analysis generated for @{handle} yet")
    return result


@router.post(
    "/fetch",
    response_model=CycleReportResponse,
    summary="Run a fetch cycle now",
)
async def trigger_fetch(
    scheduler: FetchScheduler = Depends(get_fetch_scheduler),
) -> CycleReportResponse:
    report = await scheduler.trigger()
    return CycleReportResponse.from_report(report)


@router.get(
    "/fetch",
    response_model=FetchStatusResponse,
    summary="State of the fetch scheduler",
)
async def fetch_status(
    acquisition: AcquisitionService = Depends(get_acquisition_service),
    scheduler: FetchScheduler = Depends(get_fetch_scheduler),
) -> FetchStatusResponse:
    last = acquisition.last_report
    return FetchStatusResponse(
        state=acquisition.state.value,
        scheduler_running=scheduler.is_running,
        last_report=CycleReportResponse.from_report(last) if last is not None else None,
    )
