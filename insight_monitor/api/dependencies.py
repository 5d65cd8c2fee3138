"""
Dependency injection for FastAPI endpoints.

Services are process-wide singletons created on first request and
released by cleanup_dependencies() at shutdown.
"""

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.analysis.service import BatchAnalysisService
from insight_monitor.cache.repository import ResultCache
from insight_monitor.cache.summary_service import SummaryService
from insight_monitor.extraction.config import ExtractionConfig
from insight_monitor.extraction.service import ExtractionService
from insight_monitor.social.acquisition import AcquisitionService
from insight_monitor.social.analysis import PostAnalysisService
from insight_monitor.social.client import SocialClient
from insight_monitor.social.config import SocialConfig
from insight_monitor.social.repository import SocialRepository
from insight_monitor.social.scheduler import FetchScheduler
from insight_monitor.social.synthetic import create_synthetic_source
from insight_monitor.storage.database import Database, close_database
from insight_monitor.storage.database import get_database as _get_global_database
from insight_monitor.storage.repository import DocumentRepository

# Global service instances (initialized on first request)
_analysis_client: AnalysisClient | None = None
_social_client: SocialClient | None = None
_extraction_service: ExtractionService | None = None
_acquisition_service: AcquisitionService | None = None
_fetch_scheduler: FetchScheduler | None = None


async def get_database() -> Database:
    return await _get_global_database()


async def get_document_repository() -> DocumentRepository:
    return DocumentRepository(await get_database())


async def get_result_cache() -> ResultCache:
    return ResultCache(await get_database())


async def get_social_repository() -> SocialRepository:
    return SocialRepository(await get_database())


def get_analysis_client() -> AnalysisClient:
    """Shared analysis client (lazy SDK initialization happens on first call)."""
    global _analysis_client
    if _analysis_client is None:
        _analysis_client = AnalysisClient(AnalysisConfig())
    return _analysis_client


def get_social_client() -> SocialClient | None:
    """Social API client, or None when no bearer token is configured."""
    global _social_client
    config = SocialConfig()
    if _social_client is None and config.client_configured:
        _social_client = SocialClient(
            bearer_token=config.bearer_token.get_secret_value(),
            base_url=config.api_base_url,
            timeout=config.request_timeout,
        )
    return _social_client


async def get_extraction_service() -> ExtractionService:
    """Singleton so background extractions are tracked in one place."""
    global _extraction_service
    if _extraction_service is None:
        _extraction_service = ExtractionService(
            await get_document_repository(),
            ExtractionConfig(),
        )
    return _extraction_service


async def get_summary_service() -> SummaryService:
    client = get_analysis_client()
    return SummaryService(
        await get_document_repository(),
        await get_result_cache(),
        client,
    )


async def get_batch_analysis_service() -> BatchAnalysisService:
    client = get_analysis_client()
    return BatchAnalysisService(
        await get_document_repository(),
        await get_result_cache(),
        client,
    )


async def get_acquisition_service() -> AcquisitionService:
    """Singleton so the last cycle state survives between requests."""
    global _acquisition_service
    if _acquisition_service is None:
        config = SocialConfig()
        _acquisition_service = AcquisitionService(
            await get_social_repository(),
            client=get_social_client(),
            synthetic=create_synthetic_source(config),
            config=config,
        )
    return _acquisition_service


async def get_post_analysis_service() -> PostAnalysisService:
    return PostAnalysisService(
        await get_social_repository(),
        await get_result_cache(),
        get_analysis_client(),
        SocialConfig(),
    )


async def get_fetch_scheduler() -> FetchScheduler:
    global _fetch_scheduler
    if _fetch_scheduler is None:
        config = SocialConfig()
        _fetch_scheduler = FetchScheduler(
            await get_acquisition_service(),
            interval_seconds=config.fetch_interval_seconds,
            run_on_start=config.fetch_on_startup,
        )
    return _fetch_scheduler


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _analysis_client, _social_client, _extraction_service
    global _acquisition_service, _fetch_scheduler

    if _fetch_scheduler is not None:
        await _fetch_scheduler.stop()
        _fetch_scheduler = None

    if _extraction_service is not None:
        await _extraction_service.wait_for_pending()
        _extraction_service = None

    _acquisition_service = None

    if _social_client is not None:
        await _social_client.close()
        _social_client = None

    if _analysis_client is not None:
        await _analysis_client.close()
        _analysis_client = None

    await close_database()
