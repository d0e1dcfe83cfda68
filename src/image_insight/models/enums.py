"""Enumerations for the ImageInsight data model."""

from enum import Enum


class AnalysisCategory(str, Enum):
    """What kind of features to extract from an image.

    OBJECTS_AND_SCENES keeps the "objects" value for compatibility; the legacy
    "scenes" request token maps onto the same member (see parse_categories).
    """

    TEXT = "text"
    FACES = "faces"
    OBJECTS_AND_SCENES = "objects"
    BARCODES = "barcodes"
    SALIENCY = "saliency"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DISPLAY_NAMES: dict[AnalysisCategory, str] = {
    AnalysisCategory.TEXT: "Text Recognition",
    AnalysisCategory.FACES: "Face Detection",
    AnalysisCategory.OBJECTS_AND_SCENES: "Objects & Scenes",
    AnalysisCategory.BARCODES: "Barcode Detection",
    AnalysisCategory.SALIENCY: "Saliency Detection",
}

_DESCRIPTIONS: dict[AnalysisCategory, str] = {
    AnalysisCategory.TEXT: "Extract text from images (OCR)",
    AnalysisCategory.FACES: "Detect faces and facial landmarks",
    AnalysisCategory.OBJECTS_AND_SCENES: "Classify objects and scene types",
    AnalysisCategory.BARCODES: "Detect and read barcodes/QR codes",
    AnalysisCategory.SALIENCY: "Identify visually prominent areas",
}


class ErrorKind(str, Enum):
    """Tag carried by every AnalysisError."""

    INVALID_REFERENCE = "invalid-reference"
    UNREADABLE_DATA = "unreadable-data"
    EXTRACTION_FAILURE = "extraction-failure"
    NO_CATEGORIES_REQUESTED = "no-categories-requested"
