"""Shared pytest fixtures for ImageInsight tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from image_insight.extraction.orchestrator import ExtractionOrchestrator
from image_insight.models.enums import AnalysisCategory
from image_insight.models.features import (
    BarcodeResult,
    FaceLandmarks,
    FaceResult,
    ObjectResult,
    SaliencyResult,
    TextResult,
)
from image_insight.models.geometry import NormalizedPoint, NormalizedRect
from image_insight.preprocessing.preprocessor import ImagePreprocessor
from image_insight.services.analyzer import VisionAnalyzer

_EXIF_ORIENTATION_TAG = 0x0112

ImageFactory = Callable[..., Path]


class FakeCapability:
    """Capability double that records calls and returns canned results."""

    def __init__(
        self,
        name: str,
        results: Sequence[Any] = (),
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.name = name
        self.results = list(results)
        self.error = error
        self.delay = delay
        self.calls: list[tuple[Path, int]] = []
        self.finished = 0

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def extract(self, path: Path, *, orientation: int = 1) -> list[Any]:
        self.calls.append((path, orientation))
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished += 1
        if self.error is not None:
            raise self.error
        return list(self.results)


def make_text(text: str, height: float, y: float = 0.1, confidence: float = 0.9) -> TextResult:
    """Text result whose box has the given normalized height."""
    return TextResult(
        text=text,
        confidence=confidence,
        box=NormalizedRect(x=0.1, y=y, width=0.5, height=height),
    )


def sample_results() -> dict[AnalysisCategory, list[Any]]:
    """One small, fixed set of results per category."""
    return {
        AnalysisCategory.TEXT: [
            make_text("Grand Opening", 0.10, y=0.8, confidence=0.98),
            make_text("open daily 9-5", 0.04, y=0.2, confidence=0.87),
        ],
        AnalysisCategory.FACES: [
            FaceResult(
                box=NormalizedRect(0.3, 0.3, 0.2, 0.25),
                landmarks=FaceLandmarks(
                    left_eye=NormalizedPoint(0.3, 0.7),
                    right_eye=NormalizedPoint(0.7, 0.7),
                    mouth=NormalizedPoint(0.5, 0.25),
                ),
            ),
        ],
        AnalysisCategory.OBJECTS_AND_SCENES: [
            ObjectResult("outdoor_scene", 0.62),
            ObjectResult("building", 0.21),
        ],
        AnalysisCategory.BARCODES: [
            BarcodeResult("https://example.com", "QR", NormalizedRect(0.7, 0.1, 0.2, 0.2)),
        ],
        AnalysisCategory.SALIENCY: [
            SaliencyResult(
                boxes=(
                    NormalizedRect(0.2, 0.2, 0.5, 0.5),
                    NormalizedRect(0.7, 0.1, 0.2, 0.2),
                )
            ),
        ],
    }


@pytest.fixture
def fake_capabilities() -> dict[AnalysisCategory, FakeCapability]:
    samples = sample_results()
    return {
        category: FakeCapability(f"fake-{category.value}", samples[category])
        for category in AnalysisCategory
    }


@pytest.fixture
def orchestrator(fake_capabilities: dict[AnalysisCategory, FakeCapability]) -> ExtractionOrchestrator:
    return ExtractionOrchestrator(fake_capabilities)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Directory derived artifacts are written to."""
    directory = tmp_path / "derived"
    directory.mkdir()
    return directory


@pytest.fixture
def preprocessor(temp_dir: Path) -> ImagePreprocessor:
    return ImagePreprocessor(max_dimension=64, temp_dir=temp_dir)


@pytest.fixture
def analyzer(preprocessor: ImagePreprocessor, orchestrator: ExtractionOrchestrator) -> VisionAnalyzer:
    return VisionAnalyzer(preprocessor=preprocessor, orchestrator=orchestrator)


@pytest.fixture
def image_factory(tmp_path: Path) -> ImageFactory:
    """Write test images into a per-test source directory."""
    source_dir = tmp_path / "source"
    source_dir.mkdir()
    counter = 0

    def create_test_image(
        width: int = 32,
        height: int = 24,
        format: str = "PNG",
        name: str | None = None,
        color: str | int = "red",
        orientation: int | None = None,
        mode: str = "RGB",
    ) -> Path:
        nonlocal counter
        counter += 1
        suffix = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp", "BMP": ".bmp"}.get(format, ".img")
        path = source_dir / (name or f"image-{counter}{suffix}")

        img = Image.new(mode, (width, height), color=color)
        if orientation is not None:
            exif = Image.Exif()
            exif[_EXIF_ORIENTATION_TAG] = orientation
            img.save(path, format=format, exif=exif)
        else:
            img.save(path, format=format)
        return path

    return create_test_image
