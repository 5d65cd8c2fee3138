"""Language-model client for batch, post and document analysis.

Wraps the OpenAI async SDK with lazy initialization, JSON response mode
and normalization of every response. Failures never propagate: insight
calls fall back to default objects with status ``failed`` and summary
calls return None so the caller can use a heuristic instead.

The SDK import is deferred to first use to avoid import-time failures
when no API key is configured.
"""

import base64
import json
import logging
import mimetypes
import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from insight_monitor.analysis.config import AnalysisConfig
from insight_monitor.analysis.normalizer import normalize_document_insight, normalize_post_insight
from insight_monitor.analysis.prompts import (
    DOCUMENT_ANALYSIS_PROMPT,
    DOCUMENT_SYSTEM_PROMPT,
    FILE_SUMMARY_PROMPT,
    POST_ANALYSIS_PROMPT,
    POST_LINE,
    SUMMARY_SYSTEM_PROMPT,
    TEXT_SUMMARY_PROMPT,
)
from insight_monitor.analysis.schemas import DocumentInsight, PostInsight
from insight_monitor.observability.metrics import get_metrics

logger = logging.getLogger(__name__)


class PostLike(Protocol):
    text: str
    author: str
    posted_at: datetime


class EmptyResponseError(Exception):
    """The analysis service answered without content."""


class AnalysisClient:
    """Client for the external analysis service.

    Features:
    - Lazy SDK initialization (import on first use)
    - JSON response mode for structured results
    - Unconditional normalization of scores, labels and lists
    - Graceful fallback to defaults on any failure

    Args:
        config: Analysis configuration with API key and model names.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config or AnalysisConfig()
        self._openai_client: Any = None
        self._metrics = get_metrics()

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def _get_openai_client(self) -> Any:
        """Lazy-initialize OpenAI async client."""
        if self._openai_client is None:
            import openai

            api_key = self._config.openai_api_key
            key_str = api_key.get_secret_value() if api_key else None
            self._openai_client = openai.AsyncOpenAI(
                api_key=key_str,
                timeout=self._config.llm_timeout,
            )
        return self._openai_client

    async def _complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        json_mode: bool = True,
    ) -> str:
        client = self._get_openai_client()
        kwargs: dict[str, Any] = {
            "model": model or self._config.openai_model,
            "messages": messages,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await client.chat.completions.create(**kwargs)
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise EmptyResponseError("No content received from analysis service")
        return content

    def _record(self, target: str, status: str, started: float) -> None:
        self._metrics.analysis_requests.labels(target=target, status=status).inc()
        self._metrics.analysis_latency.labels(target=target).observe(time.perf_counter() - started)

    async def analyze_documents(self, prepared_text: str) -> DocumentInsight:
        """Analyze a prepared batch body.

        Args:
            prepared_text: Output of PreparedBatch.text.

        Returns:
            DocumentInsight; status ``failed`` if the call or parsing failed.
        """
        started = time.perf_counter()
        messages = [
            {"role": "system", "content": DOCUMENT_SYSTEM_PROMPT},
            {"role": "user", "content": DOCUMENT_ANALYSIS_PROMPT.format(documents=prepared_text)},
        ]
        try:
            raw = await self._complete(messages)
            insight = normalize_document_insight(json.loads(raw))
        except Exception as e:
            logger.warning("Document analysis failed: %s", e)
            insight = DocumentInsight.failed()

        self._record("documents", insight.status.value, started)
        return insight

    async def analyze_posts(self, posts: Sequence[PostLike]) -> PostInsight:
        """Analyze posts written by a single account.

        Returns:
            PostInsight; ``no_content`` for an empty list (no call is made),
            ``failed`` if the call or parsing failed.
        """
        if not posts:
            return PostInsight.no_content()

        started = time.perf_counter()
        body = "\n\n".join(
            POST_LINE.format(
                author=post.author,
                posted_at=post.posted_at.strftime("%Y-%m-%d %H:%M UTC"),
                text=post.text,
            )
            for post in posts
        )
        messages = [{"role": "user", "content": POST_ANALYSIS_PROMPT.format(posts=body)}]
        try:
            raw = await self._complete(messages)
            insight = normalize_post_insight(json.loads(raw))
        except Exception as e:
            logger.warning("Post analysis failed: %s", e)
            insight = PostInsight.failed()

        self._record("posts", insight.status.value, started)
        return insight

    async def summarize_text(self, filename: str, text: str) -> str | None:
        """Summarize extracted text, capped at max_per_document characters.

        Returns:
            Summary text, or None on failure.
        """
        started = time.perf_counter()
        capped = text[: self._config.max_per_document]
        messages = [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": TEXT_SUMMARY_PROMPT.format(filename=filename, text=capped)},
        ]
        try:
            summary = (await self._complete(messages, json_mode=False)).strip()
        except Exception as e:
            logger.warning("Text summary failed for %s: %s", filename, e)
            self._record("summary", "failed", started)
            return None

        self._record("summary", "generated", started)
        return summary

    async def summarize_file(self, filename: str, data: bytes) -> str | None:
        """Summarize a raw file by sending it as a multimodal content part.

        Size limits are the caller's responsibility.

        Returns:
            Summary text, or None on failure.
        """
        started = time.perf_counter()
        mime_type = mimetypes.guess_type(filename)[0] or "application/pdf"
        encoded = base64.b64encode(data).decode("ascii")
        messages = [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {
                        "type": "file",
                        "file": {
                            "filename": filename,
                            "file_data": f"data:{mime_type};base64,{encoded}",
                        },
                    },
                    {"type": "text", "text": FILE_SUMMARY_PROMPT.format(filename=filename)},
                ],
            },
        ]
        try:
            summary = (
                await self._complete(
                    messages, model=self._config.multimodal_model, json_mode=False
                )
            ).strip()
        except Exception as e:
            logger.warning("File summary failed for %s: %s", filename, e)
            self._record("file_summary", "failed", started)
            return None

        self._record("file_summary", "generated", started)
        return summary

    async def close(self) -> None:
        """Clean up SDK client."""
        if self._openai_client is not None:
            await self._openai_client.close()
            self._openai_client = None
