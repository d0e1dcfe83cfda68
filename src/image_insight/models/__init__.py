"""Data model for ImageInsight."""

from image_insight.models.enums import AnalysisCategory, ErrorKind
from image_insight.models.features import (
    AnalysisResults,
    BarcodeResult,
    FaceLandmarks,
    FaceResult,
    ObjectResult,
    SaliencyResult,
    TextResult,
)
from image_insight.models.geometry import ImageSize, NormalizedPoint, NormalizedRect

__all__ = [
    "AnalysisCategory",
    "AnalysisResults",
    "BarcodeResult",
    "ErrorKind",
    "FaceLandmarks",
    "FaceResult",
    "ImageSize",
    "NormalizedPoint",
    "NormalizedRect",
    "ObjectResult",
    "SaliencyResult",
    "TextResult",
]
