"""Per-category feature results and the analysis aggregate."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from image_insight.models.enums import AnalysisCategory
from image_insight.models.geometry import ImageSize, NormalizedPoint, NormalizedRect


@dataclass(frozen=True)
class TextResult:
    """A recognized line of text.

    priority / estimated_point_size / height_in_pixels stay None until the
    text importance ranker has run.
    """

    text: str
    confidence: float
    box: NormalizedRect
    priority: int | None = None  # 1 = most prominent
    estimated_point_size: float | None = None  # relative aid, not a measurement
    height_in_pixels: float | None = None

    @property
    def confidence_percent(self) -> int:
        return int(self.confidence * 100)


@dataclass(frozen=True)
class FaceLandmarks:
    """Landmark points in face-box-relative unit coordinates."""

    left_eye: NormalizedPoint | None = None
    right_eye: NormalizedPoint | None = None
    nose: NormalizedPoint | None = None
    mouth: NormalizedPoint | None = None

    def detected_names(self) -> list[str]:
        """Names of the landmarks that were found, in a fixed order."""
        named = [
            ("left eye", self.left_eye),
            ("right eye", self.right_eye),
            ("nose", self.nose),
            ("mouth", self.mouth),
        ]
        return [name for name, point in named if point is not None]


@dataclass(frozen=True)
class FaceResult:
    box: NormalizedRect
    landmarks: FaceLandmarks | None = None
    capture_quality: float | None = None

    @property
    def quality_percent(self) -> int | None:
        if self.capture_quality is None:
            return None
        return int(self.capture_quality * 100)


@dataclass(frozen=True)
class ObjectResult:
    """An object or scene classification label."""

    identifier: str
    confidence: float

    @property
    def confidence_percent(self) -> int:
        return int(self.confidence * 100)

    @property
    def display_name(self) -> str:
        # "indoor_scene" -> "Indoor Scene"
        return self.identifier.replace("_", " ").title()


@dataclass(frozen=True)
class BarcodeResult:
    payload: str
    symbology: str
    box: NormalizedRect

    @property
    def symbology_display_name(self) -> str:
        # "EAN_13" -> "EAN 13", "QR" -> "QR"
        return self.symbology.replace("_", " ").strip()


@dataclass(frozen=True)
class SaliencyResult:
    """One saliency pass; yields zero or more salient regions."""

    boxes: tuple[NormalizedRect, ...] = ()

    @property
    def region_count(self) -> int:
        return len(self.boxes)


@dataclass(frozen=True)
class AnalysisResults:
    """Immutable aggregate of everything one analyze call produced.

    Holds one tuple per category. Categories that were not requested stay
    empty; categories whose capability failed stay empty and carry a message
    in ``failures``.
    """

    requested: frozenset[AnalysisCategory] = frozenset()
    image_size: ImageSize | None = None
    include_confidence: bool = True

    text: tuple[TextResult, ...] = ()
    faces: tuple[FaceResult, ...] = ()
    objects: tuple[ObjectResult, ...] = ()
    barcodes: tuple[BarcodeResult, ...] = ()
    saliency: tuple[SaliencyResult, ...] = ()

    failures: Mapping[AnalysisCategory, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not isinstance(self.failures, MappingProxyType):
            object.__setattr__(self, "failures", MappingProxyType(dict(self.failures)))

    def results_for(self, category: AnalysisCategory) -> tuple[object, ...]:
        """Return the result tuple that belongs to a category."""
        return getattr(self, _SLOT_NAMES[category])

    @property
    def counts(self) -> dict[AnalysisCategory, int]:
        return {category: len(self.results_for(category)) for category in AnalysisCategory}

    @property
    def has_any_results(self) -> bool:
        return any(self.counts.values())

    @property
    def result_count(self) -> int:
        return sum(self.counts.values())

    @property
    def salient_region_count(self) -> int:
        return sum(result.region_count for result in self.saliency)

    def with_text(self, text: tuple[TextResult, ...] | list[TextResult]) -> AnalysisResults:
        """Return a copy with the text slot replaced (e.g. after ranking)."""
        return dataclasses.replace(self, text=tuple(text))


# Aggregate attribute holding each category's results
_SLOT_NAMES: dict[AnalysisCategory, str] = {
    AnalysisCategory.TEXT: "text",
    AnalysisCategory.FACES: "faces",
    AnalysisCategory.OBJECTS_AND_SCENES: "objects",
    AnalysisCategory.BARCODES: "barcodes",
    AnalysisCategory.SALIENCY: "saliency",
}


def slot_name(category: AnalysisCategory) -> str:
    return _SLOT_NAMES[category]
