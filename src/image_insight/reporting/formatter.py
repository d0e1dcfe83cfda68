"""Turn an AnalysisResults aggregate into its presentation views."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from image_insight.config import settings
from image_insight.models.enums import AnalysisCategory
from image_insight.models.features import (
    AnalysisResults,
    BarcodeResult,
    FaceResult,
    ObjectResult,
    SaliencyResult,
    TextResult,
)
from image_insight.models.geometry import NormalizedPoint, NormalizedRect
from image_insight.reporting.schemas import (
    BarcodeRow,
    FaceRow,
    LandmarksModel,
    ObjectRow,
    PointModel,
    RectModel,
    SaliencyRow,
    StructuredView,
    TextRow,
    VisionAnalysisReport,
)
from image_insight.services.text_ranking import area_per_character

NO_FEATURES_SUMMARY = "No features detected in image"

# Report section order and headings
_SECTION_TITLES: dict[AnalysisCategory, str] = {
    AnalysisCategory.TEXT: "TEXT RECOGNITION",
    AnalysisCategory.FACES: "FACE DETECTION",
    AnalysisCategory.OBJECTS_AND_SCENES: "OBJECT & SCENE CLASSIFICATION",
    AnalysisCategory.BARCODES: "BARCODE DETECTION",
    AnalysisCategory.SALIENCY: "SALIENCY ANALYSIS",
}


# ── Structured view ──────────────────────────────────────────────────────────


def build_structured_view(results: AnalysisResults) -> StructuredView:
    """Convert an aggregate into its lossless JSON-ready view."""
    size = results.image_size

    text_rows = [
        TextRow(
            text=item.text,
            confidence=item.confidence,
            box=_rect(item.box),
            priority=item.priority,
            estimated_point_size=item.estimated_point_size,
            height_in_pixels=item.height_in_pixels,
            area_per_character=area_per_character(item.box, item.text, size) if size else None,
        )
        for item in results.text
    ]

    return StructuredView(
        requested=[c for c in AnalysisCategory if c in results.requested],
        image_width=size.width if size else None,
        image_height=size.height if size else None,
        include_confidence=results.include_confidence,
        text=text_rows,
        faces=[_face_row(item) for item in results.faces],
        objects=[
            ObjectRow(
                identifier=item.identifier,
                display_name=item.display_name,
                confidence=item.confidence,
            )
            for item in results.objects
        ],
        barcodes=[
            BarcodeRow(payload=item.payload, symbology=item.symbology, box=_rect(item.box))
            for item in results.barcodes
        ],
        saliency=[SaliencyRow(boxes=[_rect(b) for b in item.boxes]) for item in results.saliency],
        counts={category.value: count for category, count in results.counts.items()},
        has_any_results=results.has_any_results,
        result_count=results.result_count,
        failures={category.value: message for category, message in results.failures.items()},
    )


def _rect(rect: NormalizedRect) -> RectModel:
    return RectModel(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


def _point(point: NormalizedPoint | None) -> PointModel | None:
    if point is None:
        return None
    return PointModel(x=point.x, y=point.y)


def _face_row(face: FaceResult) -> FaceRow:
    landmarks = None
    if face.landmarks is not None:
        landmarks = LandmarksModel(
            left_eye=_point(face.landmarks.left_eye),
            right_eye=_point(face.landmarks.right_eye),
            nose=_point(face.landmarks.nose),
            mouth=_point(face.landmarks.mouth),
        )
    return FaceRow(box=_rect(face.box), landmarks=landmarks, capture_quality=face.capture_quality)


# ── Report view ──────────────────────────────────────────────────────────────


def format_report(
    results: AnalysisResults,
    *,
    object_limit: int | None = None,
) -> VisionAnalysisReport:
    """Format a successful analysis as a text report envelope.

    One section per requested category, in fixed order. ``item_count`` sums
    the result counts of the requested categories.
    """
    limit = object_limit if object_limit is not None else settings.object_result_limit
    include_confidence = results.include_confidence

    formatters: dict[AnalysisCategory, Callable[[], list[str]]] = {
        AnalysisCategory.TEXT: lambda: _text_lines(results.text, include_confidence),
        AnalysisCategory.FACES: lambda: _face_lines(results.faces, include_confidence),
        AnalysisCategory.OBJECTS_AND_SCENES: lambda: _object_lines(
            results.objects, include_confidence, limit
        ),
        AnalysisCategory.BARCODES: lambda: _barcode_lines(results.barcodes),
        AnalysisCategory.SALIENCY: lambda: _saliency_lines(results.saliency),
    }

    sections: list[str] = []
    item_count = 0
    for category in AnalysisCategory:
        if category not in results.requested:
            continue

        failure = results.failures.get(category)
        lines = [f"Extraction failed: {failure}"] if failure else formatters[category]()
        sections.append(f"{_SECTION_TITLES[category]}:\n" + "\n".join(lines))
        item_count += len(results.results_for(category))

    return VisionAnalysisReport.success(
        summary=summarize(results),
        details="\n\n".join(sections),
        item_count=item_count,
    )


def format_error(message: str) -> VisionAnalysisReport:
    return VisionAnalysisReport.error(message)


def summarize(results: AnalysisResults) -> str:
    """One phrase per non-empty requested category, comma-joined."""
    requested = results.requested
    parts: list[str] = []

    if AnalysisCategory.TEXT in requested and results.text:
        parts.append(f"Found {len(results.text)} text item(s)")
    if AnalysisCategory.FACES in requested and results.faces:
        parts.append(f"Detected {len(results.faces)} face(s)")
    if AnalysisCategory.OBJECTS_AND_SCENES in requested and results.objects:
        parts.append(f"Classified {len(results.objects)} object(s)/scene(s)")
    if AnalysisCategory.BARCODES in requested and results.barcodes:
        parts.append(f"Read {len(results.barcodes)} barcode(s)")
    if AnalysisCategory.SALIENCY in requested and results.saliency:
        parts.append(f"Found {results.salient_region_count} salient region(s)")

    return ", ".join(parts) if parts else NO_FEATURES_SUMMARY


def _text_lines(items: Sequence[TextResult], include_confidence: bool) -> list[str]:
    if not items:
        return ["No text detected"]

    lines = []
    for index, item in enumerate(items, start=1):
        suffix = f" ({item.confidence_percent}% confidence)" if include_confidence else ""
        lines.append(f'  {index}. "{item.text}"{suffix}')
    return lines


def _face_lines(items: Sequence[FaceResult], include_confidence: bool) -> list[str]:
    if not items:
        return ["No faces detected"]

    lines = []
    for index, item in enumerate(items, start=1):
        line = f"  Face {index}:"
        names = item.landmarks.detected_names() if item.landmarks else []
        if names:
            line += f" landmarks detected ({', '.join(names)})"
        if include_confidence and item.quality_percent is not None:
            line += f" - quality: {item.quality_percent}%"
        lines.append(line)
    return lines


def _object_lines(items: Sequence[ObjectResult], include_confidence: bool, limit: int) -> list[str]:
    if not items:
        return ["No objects classified"]

    top = sorted(items, key=lambda item: item.confidence, reverse=True)[:limit]
    lines = []
    for item in top:
        suffix = f" ({item.confidence_percent}%)" if include_confidence else ""
        lines.append(f"  • {item.identifier}{suffix}")
    return lines


def _barcode_lines(items: Sequence[BarcodeResult]) -> list[str]:
    if not items:
        return ["No barcodes detected"]
    return [f"  {index}. [{item.symbology}] {item.payload}" for index, item in enumerate(items, start=1)]


def _saliency_lines(items: Sequence[SaliencyResult]) -> list[str]:
    if not items:
        return ["No salient regions detected"]
    total = sum(item.region_count for item in items)
    return [f"  Detected {total} visually prominent region(s)"]
