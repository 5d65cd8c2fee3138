"""Upload intake and parser-free text classification.

Components:
- classify: raw bytes + extension -> typed ClassificationOutcome
- ExtractionService (``insight_monitor.extraction.service``): validates
  uploads, stores bytes, runs extraction inline for text files and as a
  background task for PDFs
"""

from insight_monitor.extraction.classifier import classify
from insight_monitor.extraction.config import ExtractionConfig
from insight_monitor.extraction.schemas import (
    BinaryContent,
    ClassificationKind,
    ClassificationOutcome,
    Document,
    DocumentBatch,
    ExtractionStatus,
    MinimalText,
    PlainText,
    Provenance,
    UnsupportedType,
)

__all__ = [
    "BinaryContent",
    "ClassificationKind",
    "ClassificationOutcome",
    "Document",
    "DocumentBatch",
    "ExtractionConfig",
    "ExtractionStatus",
    "MinimalText",
    "PlainText",
    "Provenance",
    "UnsupportedType",
    "classify",
]
