"""Pytest fixtures for social tests."""

from unittest.mock import AsyncMock

import pytest

from insight_monitor.social.config import SocialConfig
from insight_monitor.social.schemas import PlatformUser, SocialAccount

from tests.conftest import make_post


@pytest.fixture
def social_config() -> SocialConfig:
    return SocialConfig(
        bearer_token="test-token",
        fallback_handles="WSJmarkets,ReutersBiz,CNBC",
        fallback_sample_size=2,
        posts_per_account=5,
        min_posts_threshold=5,
        posts_per_page=2,
        analysis_post_limit=20,
    )


@pytest.fixture
def mock_social_repo() -> AsyncMock:
    """SocialRepository stand-in with empty storage and no tracked accounts."""
    repo = AsyncMock()
    repo.list_accounts = AsyncMock(return_value=[])
    repo.get_account = AsyncMock(return_value=None)
    repo.save_post = AsyncMock(return_value=True)
    repo.count_posts = AsyncMock(return_value=0)
    repo.list_posts = AsyncMock(return_value=[])
    repo.posts_by_handle = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_social_client() -> AsyncMock:
    """SocialClient stand-in resolving every handle and returning two posts."""
    client = AsyncMock()

    async def _resolve(handle):
        return PlatformUser(user_id=f"id-{handle}", handle=handle, name=f"{handle} name")

    async def _fetch(user, limit):
        return [
            make_post(post_id=f"{user.handle}-1", handle=user.handle),
            make_post(post_id=f"{user.handle}-2", handle=user.handle),
        ]

    client.resolve_account = AsyncMock(side_effect=_resolve)
    client.fetch_recent_posts = AsyncMock(side_effect=_fetch)
    return client


def tracked(*handles: str) -> list[SocialAccount]:
    return [SocialAccount(handle=h, id=i) for i, h in enumerate(handles, start=1)]
