"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insight_monitor import __version__
from insight_monitor.api.dependencies import cleanup_dependencies, get_fetch_scheduler
from insight_monitor.api.routes import analysis, documents, health, social
from insight_monitor.cache.summary_service import DocumentTooLargeError, ExtractionPendingError
from insight_monitor.config.settings import get_settings
from insight_monitor.extraction.service import UnsupportedUploadError, UploadTooLargeError
from insight_monitor.observability.logging import bind_context, clear_context
from insight_monitor.social.analysis import AccountNotFoundError
from insight_monitor.social.config import SocialConfig
from insight_monitor.storage.repository import BatchNotFoundError, DocumentNotFoundError

logger = structlog.get_logger(__name__)

# Domain errors the routes let through, with their HTTP status and error_type
ERROR_STATUS: dict[type[Exception], tuple[int, str]] = {
    BatchNotFoundError: (404, "not_found"),
    DocumentNotFoundError: (404, "not_found"),
    AccountNotFoundError: (404, "not_found"),
    UploadTooLargeError: (413, "too_large"),
    DocumentTooLargeError: (413, "too_large"),
    UnsupportedUploadError: (415, "unsupported_type"),
    ExtractionPendingError: (409, "extraction_pending"),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Insight API starting up")

    if SocialConfig().scheduler_enabled:
        scheduler = await get_fetch_scheduler()
        await scheduler.start()

    yield

    logger.info("Insight API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "documents", "description": "Batches, uploads and extraction status"},
        {"name": "analysis", "description": "Batch analyses and document summaries"},
        {"name": "social", "description": "Tracked accounts, posts and fetch cycles"},
    ]

    app = FastAPI(
        title="Insight Monitor API",
        description="""
Upload financial documents, follow social accounts, and get structured
insight (themes, sentiment, recommendations) from a language model.

Results are cached: POST generates, GET reads the cache, DELETE invalidates.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request logging and correlation ID
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_context(request_id=request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    async def domain_error_handler(request: Request, exc: Exception):
        status_code, error_type = next(
            ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS
        )
        logger.info(
            "Request rejected",
            path=request.url.path,
            status_code=status_code,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error_type": error_type},
        )

    for exc_class in ERROR_STATUS:
        app.add_exception_handler(exc_class, domain_error_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(documents.router, tags=["documents"])
    app.include_router(analysis.router, tags=["analysis"])
    app.include_router(social.router, tags=["social"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Insight Monitor API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
