"""Social content acquisition and account-level post analysis.

Components:
- SocialClient: Twitter API v2 lookup and timeline fetch (httpx)
- AcquisitionService: fetch cycles with per-account isolation and
  synthetic degraded mode
- FetchScheduler: startup, periodic and manual cycles
- PostAnalysisService: analyze an account's posts, manage tracked accounts
"""

from insight_monitor.social.acquisition import AcquisitionService
from insight_monitor.social.analysis import AccountNotFoundError, PostAnalysisService
from insight_monitor.social.client import (
    AccountLookupError,
    RateLimitedError,
    SocialClient,
    SocialClientError,
)
from insight_monitor.social.config import SocialConfig
from insight_monitor.social.repository import SocialRepository
from insight_monitor.social.scheduler import FetchScheduler
from insight_monitor.social.schemas import (
    AccountFetchResult,
    CycleReport,
    CycleState,
    CycleTrigger,
    PostPage,
    SocialAccount,
    SocialPost,
)
from insight_monitor.social.synthetic import (
    DisabledSyntheticSource,
    SamplePostSource,
    SyntheticDataSource,
    create_synthetic_source,
)

__all__ = [
    "AccountFetchResult",
    "AccountLookupError",
    "AccountNotFoundError",
    "AcquisitionService",
    "CycleReport",
    "CycleState",
    "CycleTrigger",
    "DisabledSyntheticSource",
    "FetchScheduler",
    "PostAnalysisService",
    "PostPage",
    "RateLimitedError",
    "SamplePostSource",
    "SocialAccount",
    "SocialClient",
    "SocialClientError",
    "SocialConfig",
    "SocialPost",
    "SocialRepository",
    "SyntheticDataSource",
    "create_synthetic_source",
]
