"""Pydantic schemas for the two presentation views of an analysis.

- StructuredView: lossless, JSON-ready view for display consumers
- VisionAnalysisReport: success/error envelope with a text report, for the
  tool-calling surface
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from image_insight.models.enums import AnalysisCategory


class RectModel(BaseModel):
    """Normalized rect, unit coordinates, bottom-left origin."""

    x: float
    y: float
    width: float
    height: float


class PointModel(BaseModel):
    x: float
    y: float


class TextRow(BaseModel):
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    box: RectModel
    priority: int | None = Field(default=None, description="1 = most prominent")
    estimated_point_size: float | None = Field(
        default=None, description="Relative size estimate (72 DPI heuristic), not a measurement"
    )
    height_in_pixels: float | None = None
    area_per_character: float | None = Field(
        default=None, description="Box area in px² per character"
    )


class LandmarksModel(BaseModel):
    """Landmarks in face-box-relative unit coordinates."""

    left_eye: PointModel | None = None
    right_eye: PointModel | None = None
    nose: PointModel | None = None
    mouth: PointModel | None = None


class FaceRow(BaseModel):
    box: RectModel
    landmarks: LandmarksModel | None = None
    capture_quality: float | None = None


class ObjectRow(BaseModel):
    identifier: str
    display_name: str
    confidence: float = Field(ge=0.0, le=1.0)


class BarcodeRow(BaseModel):
    payload: str
    symbology: str
    box: RectModel


class SaliencyRow(BaseModel):
    boxes: list[RectModel] = Field(default_factory=list)


class StructuredView(BaseModel):
    """Every result of one analysis, passed through unchanged."""

    requested: list[AnalysisCategory] = Field(description="Categories that were analyzed")
    image_width: int | None = None
    image_height: int | None = None
    include_confidence: bool = True

    text: list[TextRow] = Field(default_factory=list)
    faces: list[FaceRow] = Field(default_factory=list)
    objects: list[ObjectRow] = Field(default_factory=list)
    barcodes: list[BarcodeRow] = Field(default_factory=list)
    saliency: list[SaliencyRow] = Field(default_factory=list)

    counts: dict[str, int] = Field(
        default_factory=dict, description="Result count per category value"
    )
    has_any_results: bool = False
    result_count: int = 0
    failures: dict[str, str] = Field(
        default_factory=dict, description="Category value → failure message"
    )


class VisionAnalysisReport(BaseModel):
    """Success or error envelope returned by the vision tool."""

    status: Literal["success", "error"] = Field(description="Outcome of the analysis")
    summary: str = Field(description="One-line summary of what was found")
    details: str = Field(description="Line-oriented per-category report")
    item_count: int = Field(default=0, ge=0, description="Total items across requested categories")
    error_message: str | None = Field(default=None, description="Set only when status is 'error'")

    @classmethod
    def success(cls, summary: str, details: str, item_count: int) -> VisionAnalysisReport:
        return cls(status="success", summary=summary, details=details, item_count=item_count)

    @classmethod
    def error(cls, message: str) -> VisionAnalysisReport:
        return cls(
            status="error",
            summary="Image analysis failed",
            details=message,
            item_count=0,
            error_message=message,
        )

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def prompt_representation(self) -> str:
        """Render the envelope as the text handed back to the language model."""
        if self.is_success:
            return (
                "Image Analysis Results\n\n"
                f"{self.summary}\n\n"
                f"{self.details}\n\n"
                f"Total items found: {self.item_count}"
            )
        return f"Image Analysis Failed\n\nError: {self.error_message or self.details}"
