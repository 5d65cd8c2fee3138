"""
Twitter API v2 client for account lookup and recent posts.

Two endpoints are used:
- GET /users/by/username/{handle}
- GET /users/{id}/tweets?max_results=K&tweet.fields=created_at

No retries and no backoff: a 429 surfaces as RateLimitedError and the
acquisition cycle moves on to the next account.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from insight_monitor.social.schemas import PlatformUser, SocialPost

logger = logging.getLogger(__name__)

TWITTER_API_BASE = "https://api.twitter.com/2"

# Bounds the API enforces on max_results for user timelines
MIN_RESULTS = 5
MAX_RESULTS = 100


class SocialClientError(Exception):
    """Request to the social API failed."""


class RateLimitedError(SocialClientError):
    """The social API answered 429."""

    def __init__(self, message: str, reset_at: int | None = None):
        super().__init__(message)
        self.reset_at = reset_at


class AccountLookupError(SocialClientError):
    """The handle does not resolve to an account."""


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class SocialClient:
    """
    Async client for the Twitter API v2.

    Usage:
        async with SocialClient(bearer_token) as client:
            user = await client.resolve_account("WSJmarkets")
            posts = await client.fetch_recent_posts(user, limit=10)
    """

    def __init__(
        self,
        bearer_token: str,
        base_url: str = TWITTER_API_BASE,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize client.

        Args:
            bearer_token: API bearer token
            base_url: API base URL
            timeout: Request timeout in seconds
            http_client: Preconfigured client (tests); owned by the caller
        """
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {bearer_token}",
                "User-Agent": "InsightMonitor/1.0",
            },
        )

    async def __aenter__(self) -> "SocialClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            raise SocialClientError(f"Request to {path} failed: {e}") from e

        if response.status_code == 429:
            reset = response.headers.get("x-rate-limit-reset")
            raise RateLimitedError(
                f"Rate limited on {path}",
                reset_at=int(reset) if reset and reset.isdigit() else None,
            )
        if response.status_code == 404:
            raise AccountLookupError(f"{path} not found")
        if response.status_code >= 400:
            raise SocialClientError(f"{path} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise SocialClientError(f"Invalid JSON from {path}") from e

    async def resolve_account(self, handle: str) -> PlatformUser:
        """
        Look up an account by handle.

        Raises:
            AccountLookupError: Unknown or suspended handle
            RateLimitedError: HTTP 429
            SocialClientError: Transport or unexpected status
        """
        data = await self._get(f"/users/by/username/{handle}")
        user = data.get("data")
        if not user or "id" not in user:
            detail = (data.get("errors") or [{}])[0].get("detail", "no data returned")
            raise AccountLookupError(f"Account @{handle} could not be resolved: {detail}")

        return PlatformUser(
            user_id=str(user["id"]),
            handle=user.get("username", handle),
            name=user.get("name") or handle,
        )

    async def fetch_recent_posts(self, account: PlatformUser, limit: int = 10) -> list[SocialPost]:
        """
        Fetch an account's most recent posts.

        Returns:
            Up to ``limit`` posts, newest first; empty if the account has none
        """
        params = {
            "max_results": max(MIN_RESULTS, min(limit, MAX_RESULTS)),
            "tweet.fields": "created_at",
        }
        data = await self._get(f"/users/{account.user_id}/tweets", params=params)

        posts = [
            SocialPost(
                external_post_id=str(item["id"]),
                text=item.get("text", ""),
                author=account.name,
                author_handle=account.handle,
                posted_at=_parse_timestamp(item.get("created_at")),
            )
            for item in data.get("data") or []
            if "id" in item
        ]
        logger.debug(f"Fetched {len(posts)} posts for @{account.handle}")
        return posts[:limit]
