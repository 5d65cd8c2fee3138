"""Tests for CLI commands."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from insight_monitor.analysis.schemas import DocumentInsight
from insight_monitor.cli import main
from insight_monitor.storage.repository import BatchNotFoundError

from tests.conftest import LONG_TEXT


class TestClassifyCommand:
    def test_text_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text(LONG_TEXT)

        result = CliRunner().invoke(main, ["classify", str(path)])

        assert result.exit_code == 0
        assert "notes.txt: plain_text" in result.output
        assert LONG_TEXT not in result.output

    def test_binary_pdf(self, tmp_path):
        path = tmp_path / "deck.pdf"
        path.write_bytes(b"%PDF-1.7\n" + b"\x00" * 64)

        result = CliRunner().invoke(main, ["classify", str(path)])

        assert result.exit_code == 0
        assert "deck.pdf: binary_content" in result.output
        assert "reason: pdf_header" in result.output

    def test_show_text(self, tmp_path):
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"Page 1 of 3")

        result = CliRunner().invoke(main, ["classify", "--show-text", str(path)])

        assert "[MINIMAL_TEXT_CONTENT]" in result.output

    def test_missing_file(self, tmp_path):
        result = CliRunner().invoke(main, ["classify", str(tmp_path / "nope.txt")])

        assert result.exit_code != 0


def _patched_analysis(service: MagicMock):
    """Patch the database, client and service used by analyze-batch."""
    db = MagicMock()
    db.__aenter__ = AsyncMock(return_value=db)
    db.__aexit__ = AsyncMock(return_value=False)
    client = MagicMock()
    client.close = AsyncMock()
    return (
        patch("insight_monitor.storage.database.Database", return_value=db),
        patch("insight_monitor.analysis.client.AnalysisClient", return_value=client),
        patch("insight_monitor.analysis.service.BatchAnalysisService", return_value=service),
    )


class TestAnalyzeBatchCommand:
    def test_prints_insight_json(self):
        service = MagicMock()
        service.analyze_batch = AsyncMock(
            return_value=DocumentInsight(batch_id=10, summary="Strong quarter.", tickers=["NVDA"])
        )
        db_patch, client_patch, service_patch = _patched_analysis(service)

        with db_patch, client_patch, service_patch:
            result = CliRunner().invoke(main, ["analyze-batch", "10"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["tickers"] == ["NVDA"]
        service.analyze_batch.assert_awaited_once_with(10)

    def test_unknown_batch(self):
        service = MagicMock()
        service.analyze_batch = AsyncMock(side_effect=BatchNotFoundError("Batch 9 not found"))
        db_patch, client_patch, service_patch = _patched_analysis(service)

        with db_patch, client_patch, service_patch:
            result = CliRunner().invoke(main, ["analyze-batch", "9"])

        assert result.exit_code == 1
        assert "Batch 9 not found" in result.output
