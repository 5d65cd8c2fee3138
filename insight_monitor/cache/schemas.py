"""Schemas for cached per-document summaries and cache misses."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class SummarySource(str, Enum):
    """What produced a document summary."""

    TEXT_MODEL = "text_model"
    MULTIMODAL_MODEL = "multimodal_model"
    HEURISTIC = "heuristic"


class DocumentSummary(BaseModel):
    """Summary of a single document. One per document, replaced on refresh."""

    document_id: int
    summary: str
    source: SummarySource
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MissReason(str, Enum):
    """Why a cache lookup found nothing."""

    EXTRACTION_PENDING = "extraction_pending"
    NEVER_REQUESTED = "never_requested"


@dataclass(frozen=True)
class CacheMiss:
    """Returned instead of a value when nothing is cached."""

    reason: MissReason

    @property
    def extraction_pending(self) -> bool:
        return self.reason == MissReason.EXTRACTION_PENDING
