"""
Request and response models for the insight API.
"""

import datetime as dt

from pydantic import BaseModel, Field

from insight_monitor.extraction.schemas import Document, DocumentBatch
from insight_monitor.social.schemas import CycleReport, PostPage, SocialAccount, SocialPost

TEXT_PREVIEW_CHARS = 500


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_type: str = Field(default="error", description="Error type")


class DeleteResponse(BaseModel):
    deleted: bool = Field(..., description="Whether a cached value was removed")


# ── Batches and documents ────────────────────────────────


class BatchCreateRequest(BaseModel):
    """Request model for creating a document batch."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    owner_id: int | None = None


class BatchUpdateRequest(BaseModel):
    """Request model for renaming a batch; omitted fields are kept."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)


class BatchDeleteResponse(BaseModel):
    deleted: bool
    files_removed: int = Field(..., description="Stored upload files removed from disk")


class BatchResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    owner_id: int | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_batch(cls, batch: DocumentBatch) -> "BatchResponse":
        return cls(
            id=batch.id,
            name=batch.name,
            description=batch.description,
            owner_id=batch.owner_id,
            created_at=batch.created_at,
            updated_at=batch.updated_at,
        )


class DocumentResponse(BaseModel):
    """A document and the state of its extraction."""

    id: int
    batch_id: int
    filename: str
    file_type: str
    extraction_status: str = Field(..., description="pending, extracting, extracted or failed")
    extraction_kind: str | None = Field(
        default=None,
        description="plain_text, binary_content, minimal_text or unsupported_type",
    )
    analyzable: bool = False
    text_preview: str | None = None
    extraction_error: str | None = None
    created_at: dt.datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        outcome = document.outcome
        text = document.extracted_text
        return cls(
            id=document.id,
            batch_id=document.batch_id,
            filename=document.filename,
            file_type=document.file_type,
            extraction_status=document.extraction_status.value,
            extraction_kind=outcome.kind if outcome is not None else None,
            analyzable=outcome is not None and outcome.is_analyzable,
            text_preview=text[:TEXT_PREVIEW_CHARS] if text else None,
            extraction_error=document.extraction_error,
            created_at=document.created_at,
        )


class BatchDetailResponse(BaseModel):
    batch: BatchResponse
    documents: list[DocumentResponse] = Field(default_factory=list)


# ── Social ───────────────────────────────────────────────


class AccountCreateRequest(BaseModel):
    handle: str = Field(..., min_length=1, max_length=50, description="Handle, with or without @")
    display_name: str | None = Field(default=None, max_length=200)


class AccountResponse(BaseModel):
    handle: str
    display_name: str | None = None
    last_fetched_at: dt.datetime | None = None
    created_at: dt.datetime

    @classmethod
    def from_account(cls, account: SocialAccount) -> "AccountResponse":
        return cls(
            handle=account.handle,
            display_name=account.display_name,
            last_fetched_at=account.last_fetched_at,
            created_at=account.created_at,
        )


class PostResponse(BaseModel):
    external_post_id: str
    text: str
    author: str
    author_handle: str
    posted_at: dt.datetime
    fetched_at: dt.datetime
    synthetic: bool = False

    @classmethod
    def from_post(cls, post: SocialPost) -> "PostResponse":
        return cls(
            external_post_id=post.external_post_id,
            text=post.text,
            author=post.author,
            author_handle=post.author_handle,
            posted_at=post.posted_at,
            fetched_at=post.fetched_at,
            synthetic=post.synthetic,
        )


class PostPageResponse(BaseModel):
    posts: list[PostResponse]
    page: int
    per_page: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page: PostPage) -> "PostPageResponse":
        return cls(
            posts=[PostResponse.from_post(p) for p in page.posts],
            page=page.page,
            per_page=page.per_page,
            total=page.total,
            total_pages=page.total_pages,
        )


class AccountFetchResponse(BaseModel):
    handle: str
    fetched: int
    stored: int
    error: str | None = None


class CycleReportResponse(BaseModel):
    """Outcome of one fetch cycle."""

    trigger: str
    state: str = Field(..., description="completed or partially_failed")
    accounts: list[AccountFetchResponse] = Field(default_factory=list)
    posts_stored: int = 0
    synthetic_posts: int = 0
    error: str | None = None
    started_at: dt.datetime
    finished_at: dt.datetime | None = None

    @classmethod
    def from_report(cls, report: CycleReport) -> "CycleReportResponse":
        return cls(
            trigger=report.trigger.value,
            state=report.state.value,
            accounts=[
                AccountFetchResponse(
                    handle=r.handle, fetched=r.fetched, stored=r.stored, error=r.error
                )
                for r in report.accounts
            ],
            posts_stored=report.posts_stored,
            synthetic_posts=report.synthetic_posts,
            error=report.error,
            started_at=report.started_at,
            finished_at=report.finished_at,
        )


class FetchStatusResponse(BaseModel):
    state: str = Field(..., description="idle, fetching, completed or partially_failed")
    scheduler_running: bool
    last_report: CycleReportResponse | None = None


# ── Health ───────────────────────────────────────────────


class ComponentHealth(BaseModel):
    """Health status of an individual infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = None
    details: dict = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Overall service status: healthy, degraded, or unhealthy")
    version: str
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    pending_extractions: int = 0
    fetch_state: str | None = None
