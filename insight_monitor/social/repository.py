"""
Repository for social posts and tracked accounts.

Post inserts are idempotent on external_post_id: a post fetched in
several cycles is stored once and reported as new only the first time.
"""

import logging
from datetime import datetime
from typing import Any

from insight_monitor.social.schemas import SocialAccount, SocialPost
from insight_monitor.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)


class SocialRepository:
    """
    Persistence for SocialPost and SocialAccount rows.

    Tables:
        - social_posts: fetched (or synthetic) posts
        - social_accounts: handles fetched every cycle
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_tables(self) -> None:
        """Create social tables if they don't exist."""
        create_sql = """
        CREATE TABLE IF NOT EXISTS social_posts (
            id                SERIAL PRIMARY KEY,
            external_post_id  TEXT NOT NULL UNIQUE,
            text              TEXT NOT NULL,
            author            TEXT NOT NULL,
            author_handle     TEXT NOT NULL,
            posted_at         TIMESTAMPTZ NOT NULL,
            fetched_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            synthetic         BOOLEAN NOT NULL DEFAULT FALSE
        );

        CREATE INDEX IF NOT EXISTS idx_social_posts_handle
            ON social_posts(author_handle, posted_at DESC);
        CREATE INDEX IF NOT EXISTS idx_social_posts_posted_at
            ON social_posts(posted_at DESC);

        CREATE TABLE IF NOT EXISTS social_accounts (
            id               SERIAL PRIMARY KEY,
            handle           TEXT NOT NULL,
            display_name     TEXT,
            last_fetched_at  TIMESTAMPTZ,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        -- Handles are case-insensitive on the platform
        CREATE UNIQUE INDEX IF NOT EXISTS idx_social_accounts_handle_lower
            ON social_accounts (lower(handle));
        """
        await self._db.execute(create_sql)
        logger.info("Social tables created/verified")

    # ── Posts ────────────────────────────────────────────

    async def save_post(self, post: SocialPost) -> bool:
        """
        Insert a post unless its external id is already stored.

        Returns:
            True if a new row was written
        """
        sql = """
            INSERT INTO social_posts (
                external_post_id, text, author, author_handle,
                posted_at, fetched_at, synthetic
            ) VALUES ($1, $2, $3, $4, $5, $6, $7)
            ON CONFLICT (external_post_id) DO NOTHING
            RETURNING id
        """
        new_id = await self._db.fetchval(
            sql,
            post.external_post_id,
            post.text,
            post.author,
            post.author_handle,
            post.posted_at,
            post.fetched_at,
            post.synthetic,
        )
        return new_id is not None

    async def count_posts(self) -> int:
        return await self._db.fetchval("SELECT COUNT(*) FROM social_posts")

    async def list_posts(self, limit: int, offset: int = 0) -> list[SocialPost]:
        """Stored posts, newest first."""
        rows = await self._db.fetch(
            "SELECT * FROM social_posts ORDER BY posted_at DESC, id DESC LIMIT $1 OFFSET $2",
            limit,
            offset,
        )
        return [_row_to_post(row) for row in rows]

    async def posts_by_handle(self, handle: str, limit: int) -> list[SocialPost]:
        """Most recent posts of one handle (case-insensitive)."""
        rows = await self._db.fetch(
            """
            SELECT * FROM social_posts
            WHERE lower(author_handle) = lower($1)
            ORDER BY posted_at DESC, id DESC
            LIMIT $2
            """,
            handle,
            limit,
        )
        return [_row_to_post(row) for row in rows]

    # ── Accounts ─────────────────────────────────────────

    async def upsert_account(self, handle: str, display_name: str | None = None) -> SocialAccount:
        """
        Track a handle; an existing row keeps its name unless a new one is given.

        Handles differing only in case resolve to the same row, which keeps
        the casing it was first tracked with.
        """
        sql = """
            INSERT INTO social_accounts (handle, display_name)
            VALUES ($1, $2)
            ON CONFLICT ((lower(handle))) DO UPDATE SET
                display_name = COALESCE(EXCLUDED.display_name, social_accounts.display_name)
            RETURNING *
        """
        row = await self._db.fetchrow(sql, handle, display_name)
        return _row_to_account(row)

    async def get_account(self, handle: str) -> SocialAccount | None:
        row = await self._db.fetchrow(
            "SELECT * FROM social_accounts WHERE lower(handle) = lower($1)", handle
        )
        return _row_to_account(row) if row is not None else None

    async def list_accounts(self) -> list[SocialAccount]:
        rows = await self._db.fetch("SELECT * FROM social_accounts ORDER BY handle")
        return [_row_to_account(row) for row in rows]

    async def delete_account(self, handle: str) -> bool:
        status = await self._db.execute(
            "DELETE FROM social_accounts WHERE lower(handle) = lower($1)", handle
        )
        return affected_rows(status) > 0

    async def mark_fetched(
        self,
        handle: str,
        fetched_at: datetime,
        display_name: str | None = None,
    ) -> None:
        """Record a successful fetch. No-op for handles that are not tracked."""
        await self._db.execute(
            """
            UPDATE social_accounts
            SET last_fetched_at = $2,
                display_name = COALESCE(display_name, $3)
            WHERE lower(handle) = lower($1)
            """,
            handle,
            fetched_at,
            display_name,
        )


def _row_to_post(row: Any) -> SocialPost:
    return SocialPost(
        id=row["id"],
        external_post_id=row["external_post_id"],
        text=row["text"],
        author=row["author"],
        author_handle=row["author_handle"],
        posted_at=row["posted_at"],
        fetched_at=row["fetched_at"],
        synthetic=row["synthetic"],
    )


def _row_to_account(row: Any) -> SocialAccount:
    return SocialAccount(
        id=row["id"],
        handle=row["handle"],
        display_name=row.get("display_name"),
        last_fetched_at=row.get("last_fetched_at"),
        created_at=row["created_at"],
    )
