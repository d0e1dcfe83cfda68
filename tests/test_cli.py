"""Tests for the typer CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from image_insight import cli
from image_insight.services.analyzer import VisionAnalyzer

runner = CliRunner()


@pytest.fixture
def patched_analyzer(analyzer: VisionAnalyzer, monkeypatch: pytest.MonkeyPatch) -> VisionAnalyzer:
    """Route every VisionAnalyzer() built by the CLI to the fake-backed one."""
    monkeypatch.setattr(cli, "VisionAnalyzer", lambda: analyzer)
    original = cli.vision_analyze_image

    async def tool(image_path, analysis_types, include_confidence=None):
        return await original(image_path, analysis_types, include_confidence, analyzer=analyzer)

    monkeypatch.setattr(cli, "vision_analyze_image", tool)
    return analyzer


class TestAnalyzeCommand:
    def test_tables(self, patched_analyzer, image_factory) -> None:
        path = image_factory(32, 32)

        result = runner.invoke(cli.app, ["analyze", str(path), "-t", "text", "-t", "objects"])

        assert result.exit_code == 0, result.output
        assert "Grand Opening" in result.output
        assert "Outdoor Scene" in result.output

    def test_json(self, patched_analyzer, image_factory) -> None:
        path = image_factory(32, 32)

        result = runner.invoke(cli.app, ["analyze", str(path), "-t", "barcodes", "--json"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["barcodes"][0]["symbology"] == "QR"

    def test_report(self, patched_analyzer, image_factory) -> None:
        path = image_factory(32, 32)

        result = runner.invoke(
            cli.app, ["analyze", str(path), "-t", "text,faces", "--report", "--no-confidence"]
        )

        assert result.exit_code == 0, result.output
        assert "Image Analysis Results" in result.output
        assert "Total items found: 3" in result.output
        assert "% confidence" not in result.output

    def test_missing_file_exits_1(self, patched_analyzer, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["analyze", str(tmp_path / "nope.png"), "-t", "text"])

        assert result.exit_code == 1
        assert "invalid-reference" in result.output

    def test_report_error_exits_1(self, patched_analyzer, tmp_path: Path) -> None:
        result = runner.invoke(
            cli.app, ["analyze", str(tmp_path / "nope.png"), "-t", "text", "--report"]
        )

        assert result.exit_code == 1
        assert "Image Analysis Failed" in result.output


def test_categories_command() -> None:
    result = runner.invoke(cli.app, ["categories"])

    assert result.exit_code == 0
    assert "Text Recognition" in result.output
    assert "objects, scenes" in result.output
