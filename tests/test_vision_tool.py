"""Tests for the vision_analyze_image tool surface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic_ai.models.test import TestModel

from image_insight.errors import CorruptImageError, ExtractionFailureError
from image_insight.models.enums import AnalysisCategory
from image_insight.services.analyzer import VisionAnalyzer
from image_insight.tools import (
    VisionTool,
    VisionToolArguments,
    create_vision_agent,
    vision_analyze_image,
)
from image_insight.tools.vision_tool import NO_VALID_TYPES_MESSAGE


def total_calls(fake_capabilities) -> int:
    return sum(c.call_count for c in fake_capabilities.values())


class TestVisionToolArguments:
    def test_accepts_camel_case_aliases(self) -> None:
        args = VisionToolArguments.model_validate(
            {"imagePath": "/tmp/a.png", "analysisTypes": ["text"], "includeConfidence": False}
        )
        assert args.image_path == "/tmp/a.png"
        assert args.analysis_types == ["text"]
        assert args.include_confidence is False

    def test_accepts_field_names(self) -> None:
        args = VisionToolArguments(image_path="/tmp/a.png", analysis_types=["faces"])
        assert args.include_confidence is None

    def test_single_string_becomes_list(self) -> None:
        args = VisionToolArguments(image_path="/tmp/a.png", analysis_types="text, faces")
        assert args.analysis_types == ["text, faces"]

    def test_schema_uses_aliases_and_descriptions(self) -> None:
        schema = VisionToolArguments.model_json_schema()
        props = schema["properties"]

        assert set(props) == {"imagePath", "analysisTypes", "includeConfidence"}
        assert props["imagePath"]["description"] == "File path or URL to the image to analyze"
        assert "default: true" in props["includeConfidence"]["description"]
        assert set(schema["required"]) == {"imagePath", "analysisTypes"}


class TestVisionTool:
    """Tests for VisionTool.call."""

    async def test_two_texts_and_one_face(
        self, analyzer: VisionAnalyzer, image_factory, fake_capabilities
    ) -> None:
        path = image_factory(32, 32)

        report = await VisionTool(analyzer).call(
            VisionToolArguments(
                imagePath=str(path), analysisTypes=["text", "faces"], includeConfidence=True
            )
        )

        assert report.status == "success"
        assert report.item_count == 3
        text_section, face_section = report.details.split("\n\n")
        assert text_section.startswith("TEXT RECOGNITION:")
        assert sum(1 for line in text_section.splitlines() if line.endswith("% confidence)")) == 2
        assert face_section.startswith("FACE DETECTION:")
        assert len(face_section.splitlines()) == 2
        assert "Total items found: 3" in report.prompt_representation()

    async def test_text_is_ranked_by_prominence(
        self, analyzer: VisionAnalyzer, image_factory
    ) -> None:
        path = image_factory(32, 32)

        report = await vision_analyze_image(str(path), ["text"], analyzer=analyzer)

        lines = report.details.splitlines()
        assert lines[1].startswith('  1. "Grand Opening"')

    async def test_confidence_defaults_to_true(
        self, analyzer: VisionAnalyzer, image_factory
    ) -> None:
        path = image_factory(32, 32)
        report = await vision_analyze_image(str(path), ["objects"], analyzer=analyzer)
        assert "  • outdoor_scene (62%)" in report.details

    async def test_invalid_path_is_error_envelope(
        self, analyzer: VisionAnalyzer, fake_capabilities, tmp_path: Path
    ) -> None:
        report = await vision_analyze_image(
            str(tmp_path / "nope.jpg"), ["text", "faces"], analyzer=analyzer
        )

        assert report.status == "error"
        assert report.item_count == 0
        assert report.error_message
        assert report.error_message.startswith("Failed to load image:")
        assert total_calls(fake_capabilities) == 0

    async def test_unreadable_image_is_error_envelope(
        self, analyzer: VisionAnalyzer, tmp_path: Path, fake_capabilities
    ) -> None:
        path = tmp_path / "broken.png"
        path.write_bytes(b"not a png")

        report = await vision_analyze_image(str(path), ["text"], analyzer=analyzer)

        assert report.status == "error"
        assert report.error_message.startswith("Failed to load image:")
        assert total_calls(fake_capabilities) == 0

    @pytest.mark.parametrize("types", [[], ["colors"], ["", "  "], ["ocr", "people"]])
    async def test_no_valid_types(
        self, analyzer: VisionAnalyzer, image_factory, fake_capabilities, types: list[str]
    ) -> None:
        path = image_factory(32, 32)

        report = await vision_analyze_image(str(path), types, analyzer=analyzer)

        assert report.status == "error"
        assert report.error_message == NO_VALID_TYPES_MESSAGE
        assert total_calls(fake_capabilities) == 0

    async def test_unknown_tokens_are_dropped(
        self, analyzer: VisionAnalyzer, image_factory, fake_capabilities
    ) -> None:
        path = image_factory(32, 32)

        report = await vision_analyze_image(str(path), ["TEXT ", "colors"], analyzer=analyzer)

        assert report.status == "success"
        assert fake_capabilities[AnalysisCategory.TEXT].call_count == 1
        assert total_calls(fake_capabilities) == 1

    async def test_objects_and_scenes_extracted_once(
        self, analyzer: VisionAnalyzer, image_factory, fake_capabilities
    ) -> None:
        path = image_factory(32, 32)

        report = await vision_analyze_image(str(path), "objects,scenes", analyzer=analyzer)

        assert fake_capabilities[AnalysisCategory.OBJECTS_AND_SCENES].call_count == 1
        assert report.details.count("OBJECT & SCENE CLASSIFICATION:") == 1

    async def test_extraction_failure_is_error_envelope(
        self, analyzer: VisionAnalyzer, image_factory, fake_capabilities
    ) -> None:
        fake_capabilities[AnalysisCategory.TEXT].error = CorruptImageError("bad pixels")
        path = image_factory(32, 32)

        report = await vision_analyze_image(str(path), ["text"], analyzer=analyzer)

        assert report.status == "error"
        assert report.error_message.startswith("Analysis failed:")

    async def test_unexpected_error_is_error_envelope(self) -> None:
        analyzer = MagicMock(spec=VisionAnalyzer)
        analyzer.analyze = AsyncMock(side_effect=KeyError("surprise"))

        report = await vision_analyze_image("/tmp/a.png", ["text"], analyzer=analyzer)

        assert report.status == "error"
        assert report.error_message.startswith("Analysis failed:")

    async def test_analysis_error_message_is_unprefixed(self) -> None:
        analyzer = MagicMock(spec=VisionAnalyzer)
        analyzer.analyze = AsyncMock(side_effect=ExtractionFailureError("disk full"))

        report = await vision_analyze_image("/tmp/a.png", ["text"], analyzer=analyzer)

        assert report.error_message == "Analysis failed: disk full"

    async def test_derived_artifact_cleaned_up_and_original_kept(
        self, analyzer: VisionAnalyzer, image_factory, temp_dir: Path
    ) -> None:
        path = image_factory(256, 128)

        for _ in range(2):
            report = await vision_analyze_image(str(path), ["text"], analyzer=analyzer)
            assert report.status == "success"

        assert path.exists()
        assert list(temp_dir.iterdir()) == []


class TestVisionAgent:
    """Tests for the pydantic-ai integration."""

    def test_as_tool(self) -> None:
        tool = VisionTool(MagicMock(spec=VisionAnalyzer)).as_tool()
        assert tool.name == "vision_analyze_image"
        assert "barcodes" in tool.description

    async def test_agent_calls_tool(self) -> None:
        analyzer = MagicMock(spec=VisionAnalyzer)
        analyzer.analyze = AsyncMock()
        agent = create_vision_agent(VisionTool(analyzer), model=TestModel())

        result = await agent.run("What does /tmp/receipt.png say?")

        # TestModel invents arguments; unknown analysis types never reach the analyzer
        assert "vision_analyze_image" in result.output
        assert "Image Analysis Failed" in result.output
        analyzer.analyze.assert_not_called()
