"""Configuration for the language-model analysis client.

Provides Pydantic settings for the OpenAI API key, model selection,
timeouts and the size limits applied before text or files are sent.
All settings can be overridden via ANALYSIS_* environment variables.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisConfig(BaseSettings):
    """Configuration for document, post and summary analysis.

    Example:
        ANALYSIS_OPENAI_API_KEY=sk-...
        ANALYSIS_MAX_TOTAL=60000
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o",
        description="Chat model for batch, post and text analysis",
    )
    multimodal_model: str = Field(
        default="gpt-4o",
        description="Model that accepts file content parts",
    )
    llm_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Timeout in seconds for a single analysis call",
    )

    # Batch preparation budget (characters)
    max_per_document: int = Field(
        default=20_000,
        ge=1,
        description="Characters kept per document before truncation",
    )
    max_total: int = Field(
        default=80_000,
        ge=1,
        description="Target character budget for a whole batch",
    )

    multimodal_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Largest raw file sent as a multimodal content part",
    )
