"""Base types for feature extraction capabilities."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import numpy as np
from PIL import Image

from image_insight.errors import CorruptImageError
from image_insight.models.geometry import ImageSize

# PIL transpose for each EXIF orientation (same table as ImageOps.exif_transpose)
_ORIENTATION_TRANSPOSE: dict[int, Image.Transpose] = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


class Capability(Protocol):
    """Protocol for extraction capabilities.

    One capability serves one analysis category. It reads the artifact at
    ``path``, applies the orientation hint, and returns category-specific
    results whose geometry is normalized to the upright image with a
    bottom-left origin.

    Signals:
        CorruptImageError: pixel data unusable (fatal for the whole call)
        CapabilityUnavailableError: backend missing or not configured
    Any other exception is recorded as a failure of this category only.
    """

    name: str

    async def extract(self, path: Path, *, orientation: int = 1) -> Sequence[Any]:
        """Extract features from the image file at ``path``.

        Args:
            path: Artifact file to read (never modified).
            orientation: EXIF orientation of the stored pixels (1-8).

        Returns:
            Results for this capability's category.
        """
        ...


def load_upright_image(path: Path, orientation: int = 1, mode: str = "RGB") -> Image.Image:
    """Load an image, convert it to ``mode`` and rotate it upright.

    Raises:
        CorruptImageError: If the pixel data cannot be decoded.
    """
    try:
        with Image.open(path) as img:
            img.load()
            converted = img.convert(mode)
    except (OSError, SyntaxError, ValueError) as e:
        raise CorruptImageError(f"Cannot decode pixels of {path.name}: {e}") from e

    transpose = _ORIENTATION_TRANSPOSE.get(orientation)
    if transpose is not None:
        converted = converted.transpose(transpose)
    return converted


def load_upright_array(path: Path, orientation: int = 1) -> tuple[np.ndarray, ImageSize]:
    """Load an upright image as an OpenCV-ready BGR array.

    Returns:
        (bgr_array, upright_size)
    """
    img = load_upright_image(path, orientation, mode="RGB")
    rgb = np.asarray(img)
    bgr = np.ascontiguousarray(rgb[:, :, ::-1])
    return bgr, ImageSize(img.width, img.height)
