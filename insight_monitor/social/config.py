"""Configuration for social content acquisition.

All settings can be overridden via SOCIAL_* environment variables.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SocialConfig(BaseSettings):
    """Settings for the social API client, fetch cycles and post analysis.

    Example:
        SOCIAL_BEARER_TOKEN=AAAA...
        SOCIAL_FETCH_INTERVAL_SECONDS=900
        SOCIAL_SYNTHETIC_ENABLED=false
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API access
    bearer_token: SecretStr | None = Field(
        default=None,
        description="Twitter API v2 bearer token; no fetching without it",
    )
    api_base_url: str = Field(
        default="https://api.twitter.com/2",
        description="Base URL of the social API",
    )
    request_timeout: float = Field(default=30.0, gt=0.0)

    # Fetch cycles
    scheduler_enabled: bool = Field(
        default=True,
        description="Run the fetch scheduler inside the API process",
    )
    fetch_interval_seconds: int = Field(
        default=3600,
        ge=60,
        description="Seconds between periodic fetch cycles",
    )
    fetch_on_startup: bool = Field(
        default=True,
        description="Run one cycle as soon as the scheduler starts",
    )
    posts_per_account: int = Field(
        default=10,
        ge=5,
        le=100,
        description="Recent posts requested per account (API allows 5-100)",
    )
    fallback_handles: str | None = Field(
        default=None,
        description="Comma-separated handles used when no account is tracked",
    )
    fallback_sample_size: int = Field(
        default=3,
        ge=1,
        description="Fallback handles sampled per cycle",
    )

    # Degraded mode
    synthetic_enabled: bool = Field(
        default=True,
        description="Store sample posts when nothing could be fetched",
    )
    min_posts_threshold: int = Field(
        default=5,
        ge=0,
        description="Synthetic posts are only added while fewer posts are stored",
    )

    # Reading and analysis
    posts_per_page: int = Field(default=10, ge=1, le=100)
    analysis_post_limit: int = Field(
        default=50,
        ge=1,
        description="Most recent posts sent for one account analysis",
    )

    @property
    def client_configured(self) -> bool:
        return self.bearer_token is not None and bool(self.bearer_token.get_secret_value())
