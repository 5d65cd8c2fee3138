"""
Social content acquisition: one fetch cycle over a set of accounts.

Accounts are the tracked ones, or a random sample of the fallback list
when nothing is tracked. Each account is resolved, its recent posts
fetched and stored idempotently. A failure affects only its own
account. When no account succeeded and storage is nearly empty, the
synthetic source fills in sample posts.
"""

import random
from datetime import datetime, timezone

import structlog

from insight_monitor.config.social_accounts import parse_handles
from insight_monitor.observability.metrics import get_metrics
from insight_monitor.social.client import SocialClient
from insight_monitor.social.config import SocialConfig
from insight_monitor.social.repository import SocialRepository
from insight_monitor.social.schemas import (
    AccountFetchResult,
    CycleReport,
    CycleState,
    CycleTrigger,
)
from insight_monitor.social.synthetic import DisabledSyntheticSource, SyntheticDataSource

logger = structlog.get_logger(__name__)


class AcquisitionService:
    """
    Runs fetch cycles.

    Cycles may overlap (startup, periodic and manual triggers share
    run_cycle without a lock); idempotent inserts keep that safe.

    Args:
        repository: Social persistence.
        client: Social API client, or None when no token is configured.
        synthetic: Degraded-mode source.
        config: Social configuration.
    """

    def __init__(
        self,
        repository: SocialRepository,
        client: SocialClient | None = None,
        synthetic: SyntheticDataSource | None = None,
        config: SocialConfig | None = None,
    ):
        self._repo = repository
        self._client = client
        self._synthetic = synthetic or DisabledSyntheticSource()
        self._config = config or SocialConfig()
        self._metrics = get_metrics()
        self._state = CycleState.IDLE
        self._last_report: CycleReport | None = None

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def last_report(self) -> CycleReport | None:
        return self._last_report

    async def run_cycle(self, trigger: CycleTrigger = CycleTrigger.MANUAL) -> CycleReport:
        """
        Fetch all selected accounts once.

        Never raises; errors end up in the report and the final state.
        """
        self._state = CycleState.FETCHING
        report = CycleReport(trigger=trigger)
        logger.info("Fetch cycle started", trigger=trigger.value)

        try:
            handles = await self._select_handles()
            if self._client is None:
                logger.warning("Social API client not configured, skipping fetch")
            else:
                for handle in handles:
                    report.accounts.append(await self._fetch_account(handle))

            if not report.succeeded_accounts:
                report.synthetic_posts = await self._fill_synthetic(handles)
        except Exception as e:
            report.error = str(e)
            logger.error("Fetch cycle error", trigger=trigger.value, error=str(e))

        report.finish()
        self._state = report.state
        self._last_report = report
        self._metrics.fetch_cycles.labels(trigger=trigger.value, state=report.state.value).inc()

        logger.info(
            "Fetch cycle finished",
            trigger=trigger.value,
            state=report.state.value,
            accounts=len(report.accounts),
            failed=report.failed_accounts,
            posts_stored=report.posts_stored,
            synthetic_posts=report.synthetic_posts,
        )
        return report

    async def _select_handles(self) -> list[str]:
        accounts = await self._repo.list_accounts()
        if accounts:
            return [account.handle for account in accounts]

        fallback = parse_handles(self._config.fallback_handles)
        size = min(self._config.fallback_sample_size, len(fallback))
        handles = random.sample(fallback, size)
        logger.debug("No tracked accounts, using fallback sample", handles=handles)
        return handles

    async def _fetch_account(self, handle: str) -> AccountFetchResult:
        result = AccountFetchResult(handle=handle)
        try:
            user = await self._client.resolve_account(handle)
            posts = await self._client.fetch_recent_posts(user, self._config.posts_per_account)
            result.fetched = len(posts)
            for post in posts:
                if await self._repo.save_post(post):
                    result.stored += 1
            await self._repo.mark_fetched(handle, datetime.now(timezone.utc), display_name=user.name)
        except Exception as e:
            result.error = f"{type(e).__name__}: {e}"
            logger.warning("Account fetch failed", handle=handle, error=result.error)

        if result.stored:
            self._metrics.posts_stored.inc(result.stored)
        return result

    async def _fill_synthetic(self, handles: list[str]) -> int:
        stored_count = await self._repo.count_posts()
        if stored_count >= self._config.min_posts_threshold:
            return 0

        stored = 0
        for post in self._synthetic.sample_posts(handles):
            if await self._repo.save_post(post):
                stored += 1

        if stored:
            self._metrics.synthetic_posts.inc(stored)
            logger.warning(
                "Stored synthetic sample posts",
                count=stored,
                existing_posts=stored_count,
            )
        return stored
