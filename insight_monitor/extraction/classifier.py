"""
Parser-free text extraction and classification of uploaded files.

Decides, from raw bytes and the declared extension alone, whether a file
yields analyzable text. PDFs are not parsed: the classifier only filters
printable bytes and looks for PDF structure that leaked through, which
is enough to tell "text we can use" from "binary we cannot".

Thresholds callers depend on:
- PDF header window: first 50 bytes
- printable byte range: 32-126 (CR/LF become newlines)
- more than 10 ``/Name `` tokens means PDF structure
- under 100 characters or under 20 words after cleaning means minimal text

classify() never raises; every input maps to an outcome.
"""

import logging
import re

from insight_monitor.extraction.schemas import (
    BinaryContent,
    ClassificationOutcome,
    MinimalText,
    PlainText,
    Provenance,
    UnsupportedType,
)

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({"txt", "csv"})
PDF_EXTENSIONS = frozenset({"pdf"})

HEADER_WINDOW = 50
PDF_HEADER_TOKENS = (b"%PDF", b"/Type /Catalog")

PRINTABLE_MIN = 32
PRINTABLE_MAX = 126
NEWLINE_BYTES = frozenset({10, 13})

STRUCTURE_MARKERS = ("/Type /Catalog", "/Pages")
NAME_TOKEN_PATTERN = re.compile(r"/[A-Z][a-zA-Z]+ ")
MAX_NAME_TOKENS = 10

MIN_TEXT_CHARS = 100
MIN_TEXT_WORDS = 20

# Anything outside letters, digits, whitespace and everyday punctuation
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9\s.,;:!?'\"()\[\]%$&@#+=/*-]+")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")

UNSUPPORTED_MESSAGE = (
    "Text extraction is not supported for .{extension} files. "
    "Convert the document to PDF, TXT or CSV and upload it again."
)


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and drop a leading dot."""
    return extension.strip().lower().lstrip(".")


def decode_text(data: bytes) -> str:
    """Decode text uploads as UTF-8, replacing undecodable bytes."""
    return data.decode("utf-8", errors="replace")


def filter_printable(data: bytes) -> str:
    """
    Keep printable ASCII bytes, turning CR and LF into newlines.

    A CRLF pair produces two newlines; cleaning collapses them later.
    """
    chars: list[str] = []
    for byte in data:
        if PRINTABLE_MIN <= byte <= PRINTABLE_MAX:
            chars.append(chr(byte))
        elif byte in NEWLINE_BYTES:
            chars.append("\n")
    return "".join(chars)


def has_pdf_structure(text: str) -> bool:
    """True when PDF object syntax leaked through the byte filter."""
    if any(marker in text for marker in STRUCTURE_MARKERS):
        return True
    return len(NAME_TOKEN_PATTERN.findall(text)) > MAX_NAME_TOKENS


def clean_text(text: str) -> str:
    """Replace disallowed punctuation runs with spaces and collapse whitespace."""
    text = _DISALLOWED_CHARS.sub(" ", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _BLANK_LINES.sub("\n", text)
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def _classify_pdf(data: bytes, provenance: Provenance) -> ClassificationOutcome:
    header = data[:HEADER_WINDOW]
    if any(token in header for token in PDF_HEADER_TOKENS):
        return BinaryContent(reason="pdf_header", byte_count=len(data), provenance=provenance)

    candidate = filter_printable(data)
    if has_pdf_structure(candidate):
        return BinaryContent(reason="pdf_structure", byte_count=len(data), provenance=provenance)

    cleaned = clean_text(candidate)
    word_count = len(cleaned.split())
    if len(cleaned) < MIN_TEXT_CHARS or word_count < MIN_TEXT_WORDS:
        return MinimalText(
            text=cleaned,
            char_count=len(cleaned),
            word_count=word_count,
            provenance=provenance,
        )
    return PlainText(text=cleaned)


def classify(
    data: bytes,
    extension: str,
    *,
    filename: str = "",
    document_id: int | None = None,
) -> ClassificationOutcome:
    """
    Classify raw file bytes into a typed outcome.

    Args:
        data: Raw file contents
        extension: Declared extension, with or without the dot
        filename: Original filename, recorded as provenance
        document_id: Owning document id, recorded as provenance

    Returns:
        PlainText, BinaryContent, MinimalText or UnsupportedType
    """
    ext = normalize_extension(extension)
    provenance = Provenance(filename=filename or f"upload.{ext}", document_id=document_id)

    if ext in TEXT_EXTENSIONS:
        return PlainText(text=decode_text(data))
    if ext in PDF_EXTENSIONS:
        return _classify_pdf(data, provenance)

    logger.debug(f"No extraction strategy for .{ext} ({provenance.filename})")
    return UnsupportedType(
        extension=ext,
        message=UNSUPPORTED_MESSAGE.format(extension=ext or "unknown"),
        provenance=provenance,
    )
