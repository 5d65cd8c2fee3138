"""Data models for analysis results.

DocumentInsight is the structured result for a batch of documents and
PostInsight the result for one social account's posts. Both carry a
``status`` so defaults and placeholders can be told apart from results
the model actually produced.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

NEUTRAL_SCORE = 3.0
NEUTRAL_LABEL = "neutral"

INSUFFICIENT_OUTLOOK = "Insufficient information to determine market outlook."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InsightStatus(str, Enum):
    """How an insight came to be."""

    GENERATED = "generated"
    NO_CONTENT = "no_content"
    FAILED = "failed"
    PLACEHOLDER = "placeholder"


class Sentiment(BaseModel):
    """Overall tone: score 1 (very negative) to 5 (very positive)."""

    score: float = Field(default=NEUTRAL_SCORE, ge=1.0, le=5.0)
    label: str = NEUTRAL_LABEL
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class DocumentInsight(BaseModel):
    """Analysis of a document batch. One per batch, replaced on regeneration."""

    batch_id: int | None = None
    summary: str
    themes: list[str] = Field(default_factory=list)
    tickers: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    sentiment: Sentiment = Field(default_factory=Sentiment)
    shared_ideas: list[str] = Field(default_factory=list)
    diverging_ideas: list[str] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    market_sectors: list[str] = Field(default_factory=list)
    market_outlook: str = INSUFFICIENT_OUTLOOK
    key_metrics: list[str] = Field(default_factory=list)
    investment_risks: list[str] = Field(default_factory=list)
    price_trends: list[str] = Field(default_factory=list)
    status: InsightStatus = InsightStatus.GENERATED
    created_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def no_content(cls) -> "DocumentInsight":
        """Result for a batch without documents."""
        return cls(
            summary="No documents available for analysis.",
            market_outlook="No documents to analyze for market outlook.",
            status=InsightStatus.NO_CONTENT,
        )

    @classmethod
    def no_analyzable_content(cls, document_count: int) -> "DocumentInsight":
        """Result for a batch whose documents all lack extractable text."""
        noun = "document" if document_count == 1 else "documents"
        return cls(
            summary=(
                f"None of the {document_count} {noun} in this batch contain "
                "enough extractable text for analysis. Upload text-based files "
                "or request per-document summaries instead."
            ),
            market_outlook=INSUFFICIENT_OUTLOOK,
            status=InsightStatus.NO_CONTENT,
        )

    @classmethod
    def failed(cls) -> "DocumentInsight":
        """Result when the analysis service could not produce a usable answer."""
        return cls(
            summary="Error analyzing documents. Please try again later.",
            market_outlook="Market outlook data could not be generated due to analysis error.",
            status=InsightStatus.FAILED,
        )


class PostInsight(BaseModel):
    """Analysis of one account's recent posts."""

    handle: str | None = None
    summary: str
    themes: list[str] = Field(default_factory=list)
    sentiment: Sentiment = Field(default_factory=Sentiment)
    top_hashtags: list[str] = Field(default_factory=list)
    key_phrases: list[str] = Field(default_factory=list)
    status: InsightStatus = InsightStatus.GENERATED
    created_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def no_content(cls) -> "PostInsight":
        return cls(summary="No posts available for analysis.", status=InsightStatus.NO_CONTENT)

    @classmethod
    def failed(cls) -> "PostInsight":
        return cls(
            summary="Error analyzing posts. Please try again later.",
            status=InsightStatus.FAILED,
        )

    @classmethod
    def placeholder(cls, handle: str) -> "PostInsight":
        """Stand-in for a tracked account whose posts could not be fetched yet."""
        return cls(
            handle=handle,
            summary=(
                f"No posts have been collected for @{handle} yet. The social API "
                "is likely rate limiting requests; posts will be analyzed once a "
                "fetch cycle succeeds."
            ),
            status=InsightStatus.PLACEHOLDER,
        )
