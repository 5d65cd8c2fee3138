"""Pytest fixtures for analysis tests."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from insight_monitor.analysis.client import AnalysisClient
from insight_monitor.analysis.config import AnalysisConfig


def make_completion(content: str | None) -> MagicMock:
    """Shape of a chat.completions.create response."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    return AnalysisConfig(
        openai_api_key="test-openai-key",
        openai_model="gpt-test",
        multimodal_model="gpt-vision-test",
        max_per_document=1_000,
        max_total=4_000,
        multimodal_max_bytes=1_024,
    )


@pytest.fixture
def mock_openai() -> MagicMock:
    """AsyncOpenAI stand-in; set ``chat.completions.create`` per test."""
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(return_value=make_completion(json.dumps({})))
    sdk.close = AsyncMock()
    return sdk


@pytest.fixture
def analysis_client(analysis_config: AnalysisConfig, mock_openai: MagicMock) -> AnalysisClient:
    client = AnalysisClient(analysis_config)
    client._openai_client = mock_openai
    return client
