"""
Account-level post analysis and account management.

analyze_account() distinguishes three cases: posts are stored (analyze
them), the account is tracked but nothing was fetched yet (placeholder
insight), or the handle is unknown (AccountNotFoundError).
"""

import structlog

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.schemas import PostInsight
from insight_monitor.cache.repository import ResultCache
from insight_monitor.config.social_accounts import normalize_handle
from insight_monitor.social.config import SocialConfig
from insight_monitor.social.repository import SocialRepository
from insight_monitor.social.schemas import PostPage, SocialAccount

logger = structlog.get_logger(__name__)


class AccountNotFoundError(Exception):
    """No posts stored and the handle is not tracked."""


class PostAnalysisService:
    """
    Analyzes stored posts per account and manages tracked accounts.

    Args:
        repository: Social persistence.
        cache: Result cache for post analyses.
        client: Analysis client.
        config: Social configuration.
    """

    def __init__(
        self,
        repository: SocialRepository,
        cache: ResultCache,
        client: AnalysisClient,
        config: SocialConfig | None = None,
    ):
        self._repo = repository
        self._cache = cache
        self._client = client
        self._config = config or SocialConfig()

    async def analyze_account(self, handle: str) -> PostInsight:
        """
        Analyze an account's most recent posts and cache the result.

        Raises:
            AccountNotFoundError: No posts and the account is not tracked
        """
        handle = normalize_handle(handle)
        posts = await self._repo.posts_by_handle(handle, self._config.analysis_post_limit)

        if posts:
            insight = await self._client.analyze_posts(posts)
        elif await self._repo.get_account(handle) is not None:
            logger.info("Tracked account has no posts yet", handle=handle)
            insight = PostInsight.placeholder(handle)
        else:
            raise AccountNotFoundError(
                f"No posts found for @{handle}. Add the account to the tracked "
                "accounts first so its posts are fetched."
            )

        stored = await self._cache.put_post_analysis(handle, insight)
        logger.info(
            "Account analyzed",
            handle=handle,
            posts=len(posts),
            status=stored.status.value,
        )
        return stored

    async def track_account(self, handle: str, display_name: str | None = None) -> SocialAccount:
        """
        Start fetching a handle every cycle.

        Raises:
            ValueError: Empty handle
        """
        handle = normalize_handle(handle)
        if not handle:
            raise ValueError("Handle must not be empty")
        account = await self._repo.upsert_account(handle, display_name)
        logger.info("Account tracked", handle=handle)
        return account

    async def untrack_account(self, handle: str) -> bool:
        return await self._repo.delete_account(normalize_handle(handle))

    async def list_accounts(self) -> list[SocialAccount]:
        return await self._repo.list_accounts()

    async def list_posts(self, page: int = 1, per_page: int | None = None) -> PostPage:
        """One page of stored posts, newest first. Pages start at 1."""
        page = max(1, page)
        per_page = per_page or self._config.posts_per_page
        total = await self._repo.count_posts()
        posts = await self._repo.list_posts(limit=per_page, offset=(page - 1) * per_page)
        return PostPage(posts=posts, page=page, per_page=per_page, total=total)
