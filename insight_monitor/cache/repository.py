"""
Result cache for generated analyses and summaries.

Three keyed stores, no TTL and no history:
- document_analyses: one DocumentInsight per batch
- document_summaries: one DocumentSummary per document
- post_analyses: one PostInsight per social handle

Writes are ``INSERT ... ON CONFLICT DO UPDATE`` so a replacement is a
single atomic statement. Lookups return either the value or a CacheMiss
whose reason is computed in the same query from extraction status.
"""

import json
import logging
from typing import Any

from insight_monitor.analysis.schemas import DocumentInsight, InsightStatus, PostInsight, Sentiment
from insight_monitor.cache.schemas import CacheMiss, DocumentSummary, MissReason, SummarySource
from insight_monitor.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)

_PENDING_STATUSES = "('pending', 'extracting')"

_ANALYSIS_LIST_COLUMNS = (
    "themes",
    "tickers",
    "recommendations",
    "shared_ideas",
    "diverging_ideas",
    "key_points",
    "market_sectors",
    "key_metrics",
    "investment_risks",
    "price_trends",
)


class ResultCache:
    """
    Keyed store of generated results.

    Usage:
        cache = ResultCache(database)
        result = await cache.get_analysis(batch_id)
        if isinstance(result, CacheMiss):
            ...
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_tables(self) -> None:
        """Create cache tables. Requires the document tables to exist."""
        create_sql = """
        CREATE TABLE IF NOT EXISTS document_analyses (
            batch_id          INTEGER PRIMARY KEY REFERENCES document_batches(id) ON DELETE CASCADE,
            summary           TEXT NOT NULL,
            themes            TEXT[] NOT NULL DEFAULT '{}',
            tickers           TEXT[] NOT NULL DEFAULT '{}',
            recommendations   TEXT[] NOT NULL DEFAULT '{}',
            sentiment         JSONB NOT NULL,
            shared_ideas      TEXT[] NOT NULL DEFAULT '{}',
            diverging_ideas   TEXT[] NOT NULL DEFAULT '{}',
            key_points        TEXT[] NOT NULL DEFAULT '{}',
            market_sectors    TEXT[] NOT NULL DEFAULT '{}',
            market_outlook    TEXT NOT NULL,
            key_metrics       TEXT[] NOT NULL DEFAULT '{}',
            investment_risks  TEXT[] NOT NULL DEFAULT '{}',
            price_trends      TEXT[] NOT NULL DEFAULT '{}',
            status            TEXT NOT NULL,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS document_summaries (
            document_id  INTEGER PRIMARY KEY REFERENCES documents(id) ON DELETE CASCADE,
            summary      TEXT NOT NULL,
            source       TEXT NOT NULL
                CHECK (source IN ('text_model', 'multimodal_model', 'heuristic')),
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS post_analyses (
            handle        TEXT NOT NULL,
            summary       TEXT NOT NULL,
            themes        TEXT[] NOT NULL DEFAULT '{}',
            sentiment     JSONB NOT NULL,
            top_hashtags  TEXT[] NOT NULL DEFAULT '{}',
            key_phrases   TEXT[] NOT NULL DEFAULT '{}',
            status        TEXT NOT NULL,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE UNIQUE INDEX IF NOT EXISTS idx_post_analyses_handle_lower
            ON post_analyses (lower(handle));
        """
        await self._db.execute(create_sql)
        logger.info("Result cache tables created/verified")

    # ── Batch analyses ───────────────────────────────────

    async def get_analysis(self, batch_id: int) -> DocumentInsight | CacheMiss:
        """Cached insight for a batch, or why there is none."""
        sql = f"""
            SELECT a.*,
                   EXISTS (
                       SELECT 1 FROM documents d
                       WHERE d.batch_id = $1
                         AND d.extraction_status IN {_PENDING_STATUSES}
                   ) AS extraction_pending
            FROM (SELECT 1) AS one_row
            LEFT JOIN document_analyses a ON a.batch_id = $1
        """
        row = await self._db.fetchrow(sql, batch_id)
        if row is None or row["summary"] is None:
            pending = row is not None and row["extraction_pending"]
            return CacheMiss(MissReason.EXTRACTION_PENDING if pending else MissReason.NEVER_REQUESTED)
        return _row_to_document_insight(row)

    async def put_analysis(self, batch_id: int, insight: DocumentInsight) -> DocumentInsight:
        """Insert or replace the insight for a batch."""
        columns = ["batch_id", "summary", *_ANALYSIS_LIST_COLUMNS, "sentiment", "market_outlook", "status"]
        values: list[Any] = [
            batch_id,
            insight.summary,
            *(getattr(insight, name) for name in _ANALYSIS_LIST_COLUMNS),
            insight.sentiment.model_dump_json(),
            insight.market_outlook,
            insight.status.value,
        ]
        row = await self._db.fetchrow(_upsert_sql("document_analyses", "batch_id", columns), *values)
        logger.debug(f"Cached analysis for batch {batch_id} ({insight.status.value})")
        return _row_to_document_insight(row)

    async def delete_analysis(self, batch_id: int) -> bool:
        """Drop a batch's insight so the next request regenerates it."""
        status = await self._db.execute(
            "DELETE FROM document_analyses WHERE batch_id = $1", batch_id
        )
        return affected_rows(status) > 0

    # ── Document summaries ───────────────────────────────

    async def get_summary(self, document_id: int) -> DocumentSummary | CacheMiss:
        """Cached summary for a document, or why there is none."""
        sql = """
            SELECT d.extraction_status, s.summary, s.source, s.created_at
            FROM documents d
            LEFT JOIN document_summaries s ON s.document_id = d.id
            WHERE d.id = $1
        """
        row = await self._db.fetchrow(sql, document_id)
        if row is None:
            return CacheMiss(MissReason.NEVER_REQUESTED)
        if row["summary"] is None:
            pending = row["extraction_status"] in ("pending", "extracting")
            return CacheMiss(MissReason.EXTRACTION_PENDING if pending else MissReason.NEVER_REQUESTED)
        return DocumentSummary(
            document_id=document_id,
            summary=row["summary"],
            source=SummarySource(row["source"]),
            created_at=row["created_at"],
        )

    async def put_summary(self, summary: DocumentSummary) -> DocumentSummary:
        """Insert or replace a document's summary."""
        sql = """
            INSERT INTO document_summaries (document_id, summary, source, created_at)
            VALUES ($1, $2, $3, NOW())
            ON CONFLICT (document_id) DO UPDATE SET
                summary = EXCLUDED.summary,
                source = EXCLUDED.source,
                created_at = EXCLUDED.created_at
            RETURNING *
        """
        row = await self._db.fetchrow(sql, summary.document_id, summary.summary, summary.source.value)
        return DocumentSummary(
            document_id=row["document_id"],
            summary=row["summary"],
            source=SummarySource(row["source"]),
            created_at=row["created_at"],
        )

    async def delete_summary(self, document_id: int) -> bool:
        status = await self._db.execute(
            "DELETE FROM document_summaries WHERE document_id = $1", document_id
        )
        return affected_rows(status) > 0

    # ── Post analyses ────────────────────────────────────

    async def get_post_analysis(self, handle: str) -> PostInsight | CacheMiss:
        row = await self._db.fetchrow(
            "SELECT * FROM post_analyses WHERE lower(handle) = lower($1)", handle
        )
        if row is None:
            return CacheMiss(MissReason.NEVER_REQUESTED)
        return _row_to_post_insight(row)

    async def put_post_analysis(self, handle: str, insight: PostInsight) -> PostInsight:
        """Insert or replace the insight for a handle."""
        columns = ["handle", "summary", "themes", "sentiment", "top_hashtags", "key_phrases", "status"]
        row = await self._db.fetchrow(
            _upsert_sql("post_analyses", "handle", columns, conflict="(lower(handle))"),
            handle,
            insight.summary,
            insight.themes,
            insight.sentiment.model_dump_json(),
            insight.top_hashtags,
            insight.key_phrases,
            insight.status.value,
        )
        return _row_to_post_insight(row)

    async def delete_post_analysis(self, handle: str) -> bool:
        status = await self._db.execute(
            "DELETE FROM post_analyses WHERE lower(handle) = lower($1)", handle
        )
        return affected_rows(status) > 0


def _upsert_sql(table: str, key: str, columns: list[str], conflict: str | None = None) -> str:
    """INSERT ... ON CONFLICT (key) DO UPDATE over the given columns, stamping created_at.

    ``conflict`` overrides the conflict target, e.g. for an expression index.
    """
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
    updates = ",\n                ".join(
        f"{col} = EXCLUDED.{col}" for col in columns if col != key
    )
    return f"""
        INSERT INTO {table} ({", ".join(columns)}, created_at)
        VALUES ({placeholders}, NOW())
        ON CONFLICT ({conflict or key}) DO UPDATE SET
                {updates},
                created_at = EXCLUDED.created_at
        RETURNING *
    """


def _load_json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _row_to_document_insight(row: Any) -> DocumentInsight:
    """Convert an asyncpg Record to a DocumentInsight."""
    return DocumentInsight(
        batch_id=row["batch_id"],
        summary=row["summary"],
        sentiment=Sentiment.model_validate(_load_json(row["sentiment"])),
        market_outlook=row["market_outlook"],
        status=InsightStatus(row["status"]),
        created_at=row["created_at"],
        **{name: list(row[name] or []) for name in _ANALYSIS_LIST_COLUMNS},
    )


def _row_to_post_insight(row: Any) -> PostInsight:
    """Convert an asyncpg Record to a PostInsight."""
    return PostInsight(
        handle=row["handle"],
        summary=row["summary"],
        themes=list(row["themes"] or []),
        sentiment=Sentiment.model_validate(_load_json(row["sentiment"])),
        top_hashtags=list(row["top_hashtags"] or []),
        key_phrases=list(row["key_phrases"] or []),
        status=InsightStatus(row["status"]),
        created_at=row["created_at"],
    )
