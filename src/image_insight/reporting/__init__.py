"""Presentation views of analysis results."""

from image_insight.reporting.formatter import (
    build_structured_view,
    format_error,
    format_report,
    summarize,
)
from image_insight.reporting.schemas import StructuredView, VisionAnalysisReport

__all__ = [
    "StructuredView",
    "VisionAnalysisReport",
    "build_structured_view",
    "format_error",
    "format_report",
    "summarize",
]
