"""
Schemas for uploaded documents and their classification outcomes.

A classification outcome is a tagged union discriminated on ``kind``.
Downstream code branches on the tag; ``render()`` produces the stable
text form stored in ``documents.extracted_text`` so older readers of
that column still see something explainable.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class ClassificationKind(str, Enum):
    """Tag of a classification outcome."""

    PLAIN_TEXT = "plain_text"
    BINARY_CONTENT = "binary_content"
    MINIMAL_TEXT = "minimal_text"
    UNSUPPORTED_TYPE = "unsupported_type"


class ExtractionStatus(str, Enum):
    """Lifecycle of a document's text extraction."""

    PENDING = "pending"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    FAILED = "failed"


class Provenance(BaseModel):
    """Where a degraded outcome came from, so it can be reported without the bytes."""

    filename: str
    document_id: int | None = None
    classified_at: datetime = Field(default_factory=_utc_now)

    def describe(self) -> str:
        doc = f"document {self.document_id}" if self.document_id is not None else "unsaved document"
        return f'"{self.filename}" ({doc}, classified {self.classified_at.isoformat()})'


class PlainText(BaseModel):
    """Usable text."""

    kind: Literal["plain_text"] = "plain_text"
    text: str

    @property
    def is_analyzable(self) -> bool:
        return True

    def render(self) -> str:
        return self.text


class BinaryContent(BaseModel):
    """A PDF whose bytes are structure, not text."""

    kind: Literal["binary_content"] = "binary_content"
    reason: Literal["pdf_header", "pdf_structure"]
    byte_count: int = Field(ge=0)
    provenance: Provenance

    @property
    def is_analyzable(self) -> bool:
        return False

    def render(self) -> str:
        return (
            f"[BINARY_PDF_CONTENT] {self.provenance.describe()} contains binary PDF "
            f"content ({self.byte_count} bytes, detected by {self.reason.replace('_', ' ')}). "
            "No reliable text could be extracted without a PDF parser."
        )


class MinimalText(BaseModel):
    """Some text survived cleaning, but too little to analyze."""

    kind: Literal["minimal_text"] = "minimal_text"
    text: str
    char_count: int = Field(ge=0)
    word_count: int = Field(ge=0)
    provenance: Provenance

    @property
    def is_analyzable(self) -> bool:
        return False

    def render(self) -> str:
        return (
            f"[MINIMAL_TEXT_CONTENT] Only {self.char_count} characters "
            f"({self.word_count} words) could be extracted from {self.provenance.describe()}.\n\n"
            f"{self.text}"
        )


class UnsupportedType(BaseModel):
    """Extension the classifier has no strategy for."""

    kind: Literal["unsupported_type"] = "unsupported_type"
    extension: str
    message: str
    provenance: Provenance

    @property
    def is_analyzable(self) -> bool:
        return False

    def render(self) -> str:
        return f"[UNSUPPORTED_FILE_TYPE] {self.message} Source: {self.provenance.describe()}."


ClassificationOutcome = Annotated[
    Union[PlainText, BinaryContent, MinimalText, UnsupportedType],
    Field(discriminator="kind"),
]

_outcome_adapter: TypeAdapter[Any] = TypeAdapter(ClassificationOutcome)


def outcome_to_record(outcome: ClassificationOutcome) -> tuple[str, str, dict[str, Any]]:
    """
    Split an outcome into the three columns it is persisted in.

    PlainText bodies are not duplicated into the metadata column; they
    live only in ``extracted_text``.

    Returns:
        (kind, extracted_text, metadata)
    """
    exclude = {"text"} if outcome.kind == ClassificationKind.PLAIN_TEXT else None
    metadata = outcome.model_dump(mode="json", exclude=exclude)
    return outcome.kind, outcome.render(), metadata


def outcome_from_record(
    kind: str | None,
    extracted_text: str | None,
    metadata: dict[str, Any] | None,
) -> ClassificationOutcome | None:
    """Rebuild an outcome from its persisted columns (None while extraction is pending)."""
    if kind is None:
        return None
    data = dict(metadata or {})
    data["kind"] = kind
    if kind == ClassificationKind.PLAIN_TEXT:
        data["text"] = extracted_text or ""
    return _outcome_adapter.validate_python(data)


@dataclass
class DocumentBatch:
    """A named collection of documents analyzed together."""

    name: str
    description: str | None = None
    owner_id: int | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


@dataclass
class Document:
    """
    An uploaded file and the state of its text extraction.

    Attributes:
        batch_id: Owning batch.
        filename: Original (client-side) filename.
        file_type: Lower-case extension without the dot.
        file_path: Where the raw bytes were written.
        id: Database id (None before insert).
        extracted_text: Rendered outcome, None until extraction completes.
        extraction_status: pending, extracting, extracted or failed.
        outcome: Structured classification outcome, None until extracted.
        extraction_error: Why extraction failed, if it did.
        created_at: Upload time.
    """

    batch_id: int
    filename: str
    file_type: str
    file_path: str
    id: int | None = None
    extracted_text: str | None = None
    extraction_status: ExtractionStatus = ExtractionStatus.PENDING
    outcome: ClassificationOutcome | None = None
    extraction_error: str | None = None
    created_at: datetime = field(default_factory=_utc_now)

    @property
    def extraction_pending(self) -> bool:
        """True while the extracted text may still change."""
        return self.extraction_status in (ExtractionStatus.PENDING, ExtractionStatus.EXTRACTING)
