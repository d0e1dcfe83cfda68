"""Error taxonomy for image analysis.

Every failure that reaches a caller is an ``AnalysisError`` tagged with an
``ErrorKind``. Capabilities use two extra signals that never leave the
orchestrator: ``CorruptImageError`` (whole-image failure) and
``CapabilityUnavailableError`` (backend not installed/configured).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from image_insight.models.enums import ErrorKind

if TYPE_CHECKING:
    from image_insight.models.enums import AnalysisCategory


class AnalysisError(Exception):
    """Base exception for all analysis errors.

    Attributes:
        message: Human-readable error description
        kind: Error kind for programmatic handling
    """

    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class InvalidReferenceError(AnalysisError):
    """The image reference cannot be resolved to a readable local file.

    Attributes:
        reference: The reference as supplied by the caller
    """

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message, ErrorKind.INVALID_REFERENCE)
        self.reference = reference


class UnreadableDataError(AnalysisError):
    """The reference resolves but its pixel data cannot be decoded.

    Attributes:
        path: Path of the file that failed to decode
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, ErrorKind.UNREADABLE_DATA)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{super().__str__()} (image: {self.path})"
        return super().__str__()


class ExtractionFailureError(AnalysisError):
    """Extraction failed for one category or for the whole image.

    Attributes:
        category: The failing category, or None for a whole-image failure
    """

    def __init__(self, message: str, category: AnalysisCategory | None = None) -> None:
        super().__init__(message, ErrorKind.EXTRACTION_FAILURE)
        self.category = category


class NoCategoriesRequestedError(AnalysisError):
    """No analysis category was requested (or none of the tokens were valid)."""

    def __init__(self, message: str = "No analysis categories requested") -> None:
        super().__init__(message, ErrorKind.NO_CATEGORIES_REQUESTED)


class CorruptImageError(Exception):
    """Raised by a capability when the pixel data itself is unusable.

    The orchestrator treats this as fatal for the whole analyze call.
    """


class CapabilityUnavailableError(Exception):
    """Raised by a capability whose backend is missing or not configured."""
