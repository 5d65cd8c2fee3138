"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from insight_monitor.analysis.schemas import DocumentInsight
from insight_monitor.api.app import create_app
from insight_monitor.api.dependencies import (
    get_acquisition_service,
    get_batch_analysis_service,
    get_database,
    get_document_repository,
    get_extraction_service,
    get_fetch_scheduler,
    get_post_analysis_service,
    get_result_cache,
    get_summary_service,
)
from insight_monitor.cache.schemas import CacheMiss, MissReason
from insight_monitor.social.schemas import CycleState, PostPage


@pytest.fixture
def mock_doc_repo():
    """Mock DocumentRepository."""
    repo = AsyncMock()
    repo.get_batch = AsyncMock(return_value=None)
    repo.list_documents = AsyncMock(return_value=[])
    repo.get_document = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_cache():
    """Mock ResultCache with nothing cached."""
    cache = AsyncMock()
    cache.get_analysis = AsyncMock(return_value=CacheMiss(MissReason.NEVER_REQUESTED))
    cache.get_summary = AsyncMock(return_value=CacheMiss(MissReason.NEVER_REQUESTED))
    cache.get_post_analysis = AsyncMock(return_value=CacheMiss(MissReason.NEVER_REQUESTED))
    cache.delete_analysis = AsyncMock(return_value=False)
    cache.delete_summary = AsyncMock(return_value=False)
    return cache


@pytest.fixture
def mock_extraction_service():
    """Mock ExtractionService."""
    service = AsyncMock()
    service.pending_tasks = 0
    service.max_upload_bytes = 10 * 1024 * 1024
    service.validate_upload = MagicMock(return_value="txt")
    return service


@pytest.fixture
def mock_batch_analysis_service():
    service = AsyncMock()
    service.analyze_batch = AsyncMock(return_value=DocumentInsight.no_content())
    return service


@pytest.fixture
def mock_summary_service():
    return AsyncMock()


@pytest.fixture
def mock_post_analysis_service():
    service = AsyncMock()
    service.list_accounts = AsyncMock(return_value=[])
    service.list_posts = AsyncMock(return_value=PostPage(posts=[], page=1, per_page=10, total=0))
    return service


@pytest.fixture
def mock_acquisition_service():
    service = MagicMock()
    service.state = CycleState.IDLE
    service.last_report = None
    return service


@pytest.fixture
def mock_scheduler():
    scheduler = MagicMock()
    scheduler.is_running = False
    scheduler.trigger = AsyncMock()
    return scheduler


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def client(
    monkeypatch,
    mock_db,
    mock_doc_repo,
    mock_cache,
    mock_extraction_service,
    mock_batch_analysis_service,
    mock_summary_service,
    mock_post_analysis_service,
    mock_acquisition_service,
    mock_scheduler,
):
    """FastAPI TestClient with dependency overrides."""
    monkeypatch.setenv("SOCIAL_SCHEDULER_ENABLED", "false")
    app = create_app()

    app.dependency_overrides[get_database] = lambda: mock_db
    app.dependency_overrides[get_document_repository] = lambda: mock_doc_repo
    app.dependency_overrides[get_result_cache] = lambda: mock_cache
    app.dependency_overrides[get_extraction_service] = lambda: mock_extraction_service
    app.dependency_overrides[get_batch_analysis_service] = lambda: mock_batch_analysis_service
    app.dependency_overrides[get_summary_service] = lambda: mock_summary_service
    app.dependency_overrides[get_post_analysis_service] = lambda: mock_post_analysis_service
    app.dependency_overrides[get_acquisition_service] = lambda: mock_acquisition_service
    app.dependency_overrides[get_fetch_scheduler] = lambda: mock_scheduler

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
