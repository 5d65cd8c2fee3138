"""Tests for AnalysisClient."""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.schemas import InsightStatus

from tests.conftest import make_post
from tests.test_analysis.conftest import make_completion

DOCUMENT_RESPONSE = {
    "summary": "Datacenter demand drove a record quarter.",
    "themes": ["AI infrastructure"],
    "tickers": ["NVDA"],
    "recommendations": ["Accumulate on pullbacks"],
    "sentiment": {"score": 8, "label": "positive", "confidence": 0.9},
    "marketOutlook": "Constructive.",
}


class TestAnalyzeDocuments:
    @pytest.mark.asyncio
    async def test_success(self, analysis_client: AnalysisClient, mock_openai: MagicMock) -> None:
        mock_openai.chat.completions.create.return_value = make_completion(
            json.dumps(DOCUMENT_RESPONSE)
        )

        insight = await analysis_client.analyze_documents("--- Document: a.txt ---\nbody")

        assert insight.status == InsightStatus.GENERATED
        assert insight.tickers == ["NVDA"]
        assert insight.sentiment.score == 5.0
        assert insight.market_outlook == "Constructive."

        kwargs = mock_openai.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "--- Document: a.txt ---" in kwargs["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_invalid_json_returns_failed_default(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.return_value = make_completion("not json {")

        insight = await analysis_client.analyze_documents("body")

        assert insight.status == InsightStatus.FAILED
        assert insight.summary == "Error analyzing documents. Please try again later."
        assert insight.sentiment.score == 3.0

    @pytest.mark.asyncio
    async def test_empty_content_returns_failed_default(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.return_value = make_completion("   ")

        insight = await analysis_client.analyze_documents("body")

        assert insight.status == InsightStatus.FAILED

    @pytest.mark.asyncio
    async def test_api_error_returns_failed_default(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.side_effect = RuntimeError("API down")

        insight = await analysis_client.analyze_documents("body")

        assert insight.status == InsightStatus.FAILED


class TestAnalyzePosts:
    @pytest.mark.asyncio
    async def test_empty_posts_make_no_call(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        insight = await analysis_client.analyze_posts([])

        assert insight.status == InsightStatus.NO_CONTENT
        mock_openai.chat.completions.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_posts_rendered_into_prompt(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.return_value = make_completion(
            json.dumps({"summary": "Rates in focus.", "topHashtags": ["#markets"]})
        )
        posts = [make_post(), make_post(post_id="1002", text="Treasury yields slip.")]

        insight = await analysis_client.analyze_posts(posts)

        assert insight.summary == "Rates in focus."
        assert insight.top_hashtags == ["markets"]
        prompt = mock_openai.chat.completions.create.await_args.kwargs["messages"][0]["content"]
        assert "Stocks rally as yields fall." in prompt
        assert "Treasury yields slip." in prompt
        assert "WSJ Markets" in prompt

    @pytest.mark.asyncio
    async def test_failure_returns_failed_default(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.side_effect = TimeoutError()

        insight = await analysis_client.analyze_posts([make_post()])

        assert insight.status == InsightStatus.FAILED


class TestSummaries:
    @pytest.mark.asyncio
    async def test_text_summary_is_capped(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.return_value = make_completion(" Short summary. ")

        summary = await analysis_client.summarize_text("long.txt", "x" * 5_000)

        assert summary == "Short summary."
        kwargs = mock_openai.chat.completions.create.await_args.kwargs
        assert "response_format" not in kwargs
        assert "x" * 1_000 in kwargs["messages"][-1]["content"]
        assert "x" * 1_001 not in kwargs["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_text_summary_failure_is_none(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.side_effect = RuntimeError("boom")

        assert await analysis_client.summarize_text("a.txt", "text") is None

    @pytest.mark.asyncio
    async def test_file_summary_sends_file_part(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.return_value = make_completion("A scanned report.")
        data = b"%PDF-1.7 fake"

        summary = await analysis_client.summarize_file("report.pdf", data)

        assert summary == "A scanned report."
        kwargs = mock_openai.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-vision-test"
        file_part, text_part = kwargs["messages"][-1]["content"]
        assert file_part["type"] == "file"
        assert file_part["file"]["filename"] == "report.pdf"
        expected = base64.b64encode(data).decode("ascii")
        assert file_part["file"]["file_data"] == f"data:application/pdf;base64,{expected}"
        assert text_part["type"] == "text"

    @pytest.mark.asyncio
    async def test_file_summary_failure_is_none(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        mock_openai.chat.completions.create.side_effect = RuntimeError("unsupported")

        assert await analysis_client.summarize_file("report.pdf", b"data") is None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close_releases_sdk_client(
        self, analysis_client: AnalysisClient, mock_openai: MagicMock
    ) -> None:
        await analysis_client.close()

        mock_openai.close.assert_awaited_once()
        assert analysis_client._openai_client is None

    def test_sdk_created_lazily(self, analysis_config) -> None:
        client = AnalysisClient(analysis_config)
        assert client._openai_client is None
