"""
Batch preparation: turn classified documents into one bounded prompt body.

Documents without usable text are replaced by a fixed placeholder that
is neither truncated nor counted against the budget. Usable text is cut
to ``max_per_document`` first; if the batch still exceeds ``max_total``
every budgeted document is shrunk proportionally.

The proportional pass measures lengths including the truncation marker
but cuts only the body, then re-appends the marker, so the final total
may exceed ``max_total`` by at most one marker per budgeted document.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from insight_monitor.extraction.schemas import ClassificationOutcome, PlainText

logger = logging.getLogger(__name__)

DEFAULT_MAX_PER_DOCUMENT = 20_000
DEFAULT_MAX_TOTAL = 80_000

# Stripped plain text at or below this length is treated like a placeholder
MIN_CONTENT_CHARS = 50

TRUNCATION_MARKER = "... [content truncated]"

INSUFFICIENT_CONTENT = (
    '[INSUFFICIENT_DOCUMENT_CONTENT] The document titled "{filename}" contains '
    "insufficient extractable text for analysis. The text extraction process was "
    "unable to obtain meaningful content from this file. Any analysis of it would "
    "be speculative."
)


@dataclass
class PreparedDocument:
    """One document as it will appear in the prompt."""

    filename: str
    body: str
    truncated: bool = False
    budgeted: bool = True

    @property
    def content(self) -> str:
        """Body with the truncation marker appended when cut."""
        return self.body + TRUNCATION_MARKER if self.truncated else self.body

    def render(self) -> str:
        flag = " (TRUNCATED)" if self.truncated else ""
        return f"--- Document: {self.filename}{flag} ---\n{self.content}"


@dataclass
class PreparedBatch:
    """Result of prepare_documents()."""

    documents: list[PreparedDocument] = field(default_factory=list)
    total_chars: int = 0

    @property
    def analyzable(self) -> bool:
        """True when at least one document carries real text."""
        return any(doc.budgeted for doc in self.documents)

    @property
    def placeholder_count(self) -> int:
        return sum(1 for doc in self.documents if not doc.budgeted)

    @property
    def text(self) -> str:
        return "\n\n".join(doc.render() for doc in self.documents)


def has_usable_text(outcome: ClassificationOutcome | None) -> bool:
    """Plain text with more than MIN_CONTENT_CHARS after stripping."""
    return isinstance(outcome, PlainText) and len(outcome.text.strip()) > MIN_CONTENT_CHARS


def placeholder_for(filename: str) -> str:
    return INSUFFICIENT_CONTENT.format(filename=filename)


def prepare_documents(
    documents: Sequence[tuple[str, ClassificationOutcome | None]],
    *,
    max_per_document: int = DEFAULT_MAX_PER_DOCUMENT,
    max_total: int = DEFAULT_MAX_TOTAL,
) -> PreparedBatch:
    """
    Prepare (filename, outcome) pairs for a single analysis call.

    Args:
        documents: Filenames with their classification outcome (None if
            extraction never completed)
        max_per_document: Body length kept per document
        max_total: Target total over budgeted documents

    Returns:
        PreparedBatch; ``analyzable`` is False for empty input or when
        every document became a placeholder
    """
    prepared: list[PreparedDocument] = []
    total = 0

    for filename, outcome in documents:
        if not has_usable_text(outcome):
            prepared.append(
                PreparedDocument(filename=filename, body=placeholder_for(filename), budgeted=False)
            )
            continue

        text = outcome.text
        truncated = len(text) > max_per_document
        doc = PreparedDocument(
            filename=filename,
            body=text[:max_per_document] if truncated else text,
            truncated=truncated,
        )
        total += len(doc.content)
        prepared.append(doc)

    if total > max_total:
        logger.info(f"Batch exceeds character budget ({total}/{max_total}), truncating")
        new_total = 0
        for doc in prepared:
            if not doc.budgeted:
                continue
            new_length = len(doc.content) * max_total // total
            doc.body = doc.body[:new_length]
            doc.truncated = True
            new_total += len(doc.content)
        total = new_total

    logger.debug(
        f"Prepared {len(prepared)} documents "
        f"({sum(1 for d in prepared if not d.budgeted)} placeholders), {total} characters"
    )
    return PreparedBatch(documents=prepared, total_chars=total)
