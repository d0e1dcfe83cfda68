"""Analyzable artifacts handed from the preprocessor to the orchestrator.

An artifact is either the caller's original file or a pipeline-owned resized
copy. The two are distinct types so that cleanup decisions are made on the
type, never on path equality:

    OriginalArtifact  -> caller-owned, release() never touches it
    DerivedArtifact   -> pipeline-owned temp file, release() deletes it
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from image_insight.models.geometry import ImageSize

# EXIF orientations whose upright image has width and height swapped
_TRANSPOSING_ORIENTATIONS = frozenset({5, 6, 7, 8})


@dataclass(frozen=True)
class _ArtifactBase:
    path: Path
    image_size: ImageSize  # upright size of the source image
    pixel_size: ImageSize  # stored size of the file at `path`
    orientation: int = 1  # EXIF orientation hint (1-8)

    is_derived: ClassVar[bool] = False

    @property
    def analyzed_size(self) -> ImageSize:
        """Upright size of the pixels the capabilities will see."""
        return upright_size(self.pixel_size, self.orientation)


@dataclass(frozen=True)
class OriginalArtifact(_ArtifactBase):
    """The caller's own file, analyzed as-is."""


@dataclass(frozen=True)
class DerivedArtifact(_ArtifactBase):
    """A resized temporary copy owned by the preprocessor."""

    source: Path | None = None

    is_derived: ClassVar[bool] = True


Artifact = OriginalArtifact | DerivedArtifact


def upright_size(pixel_size: ImageSize, orientation: int) -> ImageSize:
    if orientation in _TRANSPOSING_ORIENTATIONS:
        return pixel_size.transposed()
    return pixel_size
