"""
Normalization of raw analysis-service JSON into insight models.

Runs on every response, not only suspicious ones: scores are clamped
to [1, 5], confidence to [0, 1], non-numeric values fall back to
neutral, list fields accept only strings and default to empty. Keys
are accepted in camelCase (as prompted) or snake_case.
"""

import math
from typing import Any

from insight_monitor.analysis.schemas import (
    INSUFFICIENT_OUTLOOK,
    NEUTRAL_LABEL,
    NEUTRAL_SCORE,
    DocumentInsight,
    InsightStatus,
    PostInsight,
    Sentiment,
)

SENTIMENT_LABELS = frozenset({"positive", "negative", "neutral"})

DOCUMENT_LIST_FIELDS = (
    "themes",
    "tickers",
    "recommendations",
    "shared_ideas",
    "diverging_ideas",
    "key_points",
    "market_sectors",
    "key_metrics",
    "investment_risks",
    "price_trends",
)

POST_LIST_FIELDS = ("themes", "top_hashtags", "key_phrases")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _pick(data: dict[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    return data.get(_camel(name))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def normalize_sentiment(raw: Any) -> Sentiment:
    """Clamp a raw sentiment object; anything unusable becomes neutral."""
    if not isinstance(raw, dict):
        return Sentiment()

    score = _as_number(raw.get("score"))
    confidence = _as_number(raw.get("confidence"))
    label = raw.get("label")
    if isinstance(label, str) and label.strip().lower() in SENTIMENT_LABELS:
        label = label.strip().lower()
    else:
        label = NEUTRAL_LABEL

    return Sentiment(
        score=clamp(score, 1.0, 5.0) if score is not None else NEUTRAL_SCORE,
        label=label,
        confidence=clamp(confidence, 0.0, 1.0) if confidence is not None else 0.0,
    )


def normalize_string_list(value: Any) -> list[str]:
    """Keep non-empty string items; a lone string becomes a one-item list."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def normalize_document_insight(data: Any) -> DocumentInsight:
    """
    Build a DocumentInsight from a parsed JSON response.

    Raises:
        ValueError: If the response is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    lists = {name: normalize_string_list(_pick(data, name)) for name in DOCUMENT_LIST_FIELDS}
    return DocumentInsight(
        summary=_text(data.get("summary"), "No summary was provided."),
        sentiment=normalize_sentiment(data.get("sentiment")),
        market_outlook=_text(_pick(data, "market_outlook"), INSUFFICIENT_OUTLOOK),
        status=InsightStatus.GENERATED,
        **lists,
    )


def normalize_post_insight(data: Any) -> PostInsight:
    """
    Build a PostInsight from a parsed JSON response.

    Raises:
        ValueError: If the response is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    lists = {name: normalize_string_list(_pick(data, name)) for name in POST_LIST_FIELDS}
    lists["top_hashtags"] = [tag.lstrip("#") for tag in lists["top_hashtags"]]
    return PostInsight(
        summary=_text(data.get("summary"), "No summary was provided."),
        sentiment=normalize_sentiment(data.get("sentiment")),
        status=InsightStatus.GENERATED,
        **lists,
    )
