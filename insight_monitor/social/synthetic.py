"""
Synthetic data for degraded mode.

When a fetch cycle gets nothing from the social API and storage holds
almost no posts, a SyntheticDataSource supplies sample posts so the
rest of the system has something to show. Sample posts are flagged
``synthetic`` and carry stable ids, so repeated cycles never store them
twice.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from insight_monitor.social.config import SocialConfig
from insight_monitor.social.schemas import SocialPost

# (handle, display name, text) for the fixed sample set
SAMPLE_POSTS = [
    (
        "WSJmarkets",
        "WSJ Markets",
        "Treasury yields edge higher as investors weigh stronger-than-expected jobs data "
        "against signs of cooling inflation. #bonds #markets",
    ),
    (
        "WSJmarkets",
        "WSJ Markets",
        "Semiconductor stocks lead the S&P 500 for a third straight session on AI "
        "infrastructure spending. $NVDA $AMD #stocks",
    ),
    (
        "ReutersBiz",
        "Reuters Business",
        "Oil prices slip as OPEC+ signals it may ease output cuts next quarter; Brent "
        "trades near $82. #oil #energy",
    ),
    (
        "ReutersBiz",
        "Reuters Business",
        "European banks report higher net interest income but warn margins will narrow "
        "as rate cuts approach. #banks #ECB",
    ),
    (
        "LizAnnSonders",
        "Liz Ann Sonders",
        "Breadth has improved meaningfully: the equal-weight index is outperforming the "
        "cap-weighted index month to date. #markets",
    ),
    (
        "LizAnnSonders",
        "Liz Ann Sonders",
        "Leading economic indicators fell again; the streak of declines now rivals prior "
        "pre-recession periods, though services remain resilient. #economy",
    ),
    (
        "charliebilello",
        "Charlie Bilello",
        "US home prices hit another record high while affordability sits near its worst "
        "level on record. #housing",
    ),
    (
        "charliebilello",
        "Charlie Bilello",
        "The 60/40 portfolio is up double digits year to date after its worst year since "
        "2008. Diversification works, eventually. #investing",
    ),
]


class SyntheticDataSource(ABC):
    """Strategy for posts stored when nothing real could be fetched."""

    @abstractmethod
    def sample_posts(self, handles: Sequence[str] = ()) -> list[SocialPost]:
        """
        Produce posts to store.

        Args:
            handles: Handles the failed cycle attempted; sources may prefer them
        """


class SamplePostSource(SyntheticDataSource):
    """Serves the fixed SAMPLE_POSTS set."""

    def sample_posts(self, handles: Sequence[str] = ()) -> list[SocialPost]:
        now = datetime.now(timezone.utc)
        wanted = {h.lower() for h in handles}
        indexed = list(enumerate(SAMPLE_POSTS))
        chosen = [item for item in indexed if item[1][0].lower() in wanted] or indexed

        return [
            SocialPost(
                external_post_id=f"sample-{handle.lower()}-{index}",
                text=text,
                author=name,
                author_handle=handle,
                posted_at=now - timedelta(hours=index + 1),
                fetched_at=now,
                synthetic=True,
            )
            for index, (handle, name, text) in chosen
        ]


class DisabledSyntheticSource(SyntheticDataSource):
    """Degraded mode off: stores nothing."""

    def sample_posts(self, handles: Sequence[str] = ()) -> list[SocialPost]:
        return []


def create_synthetic_source(config: SocialConfig | None = None) -> SyntheticDataSource:
    """Pick the source selected by SOCIAL_SYNTHETIC_ENABLED."""
    config = config or SocialConfig()
    return SamplePostSource() if config.synthetic_enabled else DisabledSyntheticSource()
