"""Upload and extraction configuration.

All settings can be overridden via ``EXTRACTION_*`` environment variables.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionConfig(BaseSettings):
    """Limits for accepted uploads and where their bytes are kept."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRACTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    upload_dir: Path = Field(
        default=Path("uploads/documents"),
        description="Directory raw uploads are written to",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Uploads larger than this are rejected before storage",
    )
    allowed_extensions: str = Field(
        default="pdf,txt,csv,doc,docx",
        description="Comma-separated extensions accepted at upload",
    )

    @property
    def allowed_extension_set(self) -> frozenset[str]:
        """Parsed, lower-cased allowed extensions."""
        return frozenset(
            e.strip().lower().lstrip(".")
            for e in self.allowed_extensions.split(",")
            if e.strip()
        )
