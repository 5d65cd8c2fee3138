"""
Schemas for social posts, tracked accounts and fetch cycles.

A fetch cycle moves idle -> fetching -> completed | partially_failed.
Its CycleReport lists one AccountFetchResult per account attempted, so
a cycle where every account failed is visible as such rather than as an
empty success.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CycleState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"


class CycleTrigger(str, Enum):
    STARTUP = "startup"
    PERIODIC = "periodic"
    MANUAL = "manual"


@dataclass
class SocialPost:
    """
    A post stored from the social API (or the synthetic source).

    Attributes:
        external_post_id: Platform id; inserts are idempotent on it.
        text: Post body.
        author: Display name.
        author_handle: Handle without the @.
        posted_at: When the post was published.
        fetched_at: When it was stored.
        synthetic: True for degraded-mode sample posts.
        id: Database id (None before insert).
    """

    external_post_id: str
    text: str
    author: str
    author_handle: str
    posted_at: datetime
    fetched_at: datetime = field(default_factory=_utc_now)
    synthetic: bool = False
    id: int | None = None


@dataclass
class SocialAccount:
    """An account whose posts are fetched every cycle."""

    handle: str
    display_name: str | None = None
    last_fetched_at: datetime | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class PlatformUser:
    """An account as resolved by the social API."""

    user_id: str
    handle: str
    name: str


@dataclass
class AccountFetchResult:
    """Outcome of fetching one account within a cycle."""

    handle: str
    fetched: int = 0
    stored: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class CycleReport:
    """Summary of one fetch cycle."""

    trigger: CycleTrigger
    state: CycleState = CycleState.FETCHING
    accounts: list[AccountFetchResult] = field(default_factory=list)
    synthetic_posts: int = 0
    error: str | None = None
    started_at: datetime = field(default_factory=_utc_now)
    finished_at: datetime | None = None

    @property
    def posts_stored(self) -> int:
        return sum(result.stored for result in self.accounts) + self.synthetic_posts

    @property
    def succeeded_accounts(self) -> list[str]:
        return [r.handle for r in self.accounts if r.succeeded]

    @property
    def failed_accounts(self) -> list[str]:
        return [r.handle for r in self.accounts if not r.succeeded]

    def finish(self) -> "CycleReport":
        """Stamp the end time and settle the final state."""
        self.finished_at = _utc_now()
        failed = self.error is not None or bool(self.failed_accounts)
        self.state = CycleState.PARTIALLY_FAILED if failed else CycleState.COMPLETED
        return self


@dataclass
class PostPage:
    """One page of stored posts, newest first."""

    posts: list[SocialPost]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.per_page))
