"""Image preprocessing and derived-artifact lifecycle.

The preprocessor turns an image reference into an artifact the extraction
capabilities can read:

1. Resolve the reference to a local file
2. Open it to learn its format, size and orientation
3. Within the size bound → hand back the original file untouched
4. Over the bound → write a downscaled copy to a unique temp file

Derived copies belong to the preprocessor until ``release`` deletes them.
Originals are never deleted, whatever the call order.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from PIL import Image

from image_insight.config import settings
from image_insight.errors import (
    ExtractionFailureError,
    InvalidReferenceError,
    UnreadableDataError,
)
from image_insight.models.geometry import ImageSize
from image_insight.preprocessing.artifacts import (
    Artifact,
    DerivedArtifact,
    OriginalArtifact,
    upright_size,
)
from image_insight.utils.references import ImageReference, resolve_reference

logger = logging.getLogger(__name__)

_EXIF_ORIENTATION_TAG = 0x0112

# Errors Pillow raises for data it cannot decode
_DECODE_ERRORS = (OSError, SyntaxError, ValueError)

# Oversized images are downscaled here, never rejected
Image.MAX_IMAGE_PIXELS = None

# Pillow formats a derived copy keeps; anything else is written as PNG
_DERIVED_SUFFIXES: dict[str, str] = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
    "TIFF": ".tiff",
}


def scaled_size(size: ImageSize, max_dimension: int) -> ImageSize:
    """Uniformly scale ``size`` so its longer edge equals ``max_dimension``."""
    scale = max_dimension / size.longer_edge
    if size.width >= size.height:
        return ImageSize(max_dimension, max(1, round(size.height * scale)))
    return ImageSize(max(1, round(size.width * scale)), max_dimension)


class ImagePreprocessor:
    """Normalize image references into analyzable artifacts.

    Usage:
        preprocessor = ImagePreprocessor()
        async with preprocessor.prepared("/photos/receipt.jpg") as artifact:
            ...  # analyze artifact.path

    or, managing the lifecycle by hand:
        artifact = await preprocessor.prepare(reference)
        try:
            ...
        finally:
            preprocessor.release(artifact)
    """

    def __init__(
        self,
        max_dimension: int | None = None,
        temp_dir: Path | None = None,
        temp_prefix: str | None = None,
    ) -> None:
        self._max_dimension = max_dimension or settings.max_image_dimension
        self._temp_dir = temp_dir or settings.temp_dir
        self._temp_prefix = temp_prefix or settings.temp_prefix

    @property
    def max_dimension(self) -> int:
        return self._max_dimension

    async def prepare(self, reference: ImageReference) -> Artifact:
        """Produce an analyzable artifact for an image reference.

        Args:
            reference: Local path, ``file://`` URI or path-like string.

        Returns:
            OriginalArtifact for the same file when it is within the size
            bound, otherwise a DerivedArtifact pointing at a resized copy.

        Raises:
            InvalidReferenceError: Reference does not resolve to a file.
            UnreadableDataError: Pixel data cannot be decoded.
            ExtractionFailureError: The resized copy could not be written.
        """
        path = resolve_reference(reference)

        # Decode and (maybe) write in a worker thread. If we are cancelled
        # meanwhile, the thread still finishes; its artifact is released
        # as soon as it does.
        work = asyncio.ensure_future(asyncio.to_thread(self._prepare_sync, path))
        try:
            artifact = await asyncio.shield(work)
        except asyncio.CancelledError:
            work.add_done_callback(self._release_abandoned)
            raise

        logger.debug(
            "[PREPARE] %s → %s (%dx%d)",
            path.name,
            "derived" if artifact.is_derived else "original",
            artifact.pixel_size.width,
            artifact.pixel_size.height,
        )
        return artifact

    def release(self, artifact: Artifact) -> None:
        """Release an artifact after analysis.

        Deletes the file only for DerivedArtifact. Safe to call repeatedly
        and when the file is already gone.
        """
        if not isinstance(artifact, DerivedArtifact):
            return

        try:
            artifact.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("[RELEASE] Could not delete derived artifact %s: %s", artifact.path, e)
            return

        logger.debug("[RELEASE] Deleted derived artifact %s", artifact.path)

    @asynccontextmanager
    async def prepared(self, reference: ImageReference) -> AsyncIterator[Artifact]:
        """Prepare an artifact and release it when the block exits.

        Release happens on success, on error and on cancellation.
        """
        artifact = await self.prepare(reference)
        try:
            yield artifact
        finally:
            self.release(artifact)

    def _release_abandoned(self, work: asyncio.Future[Artifact]) -> None:
        if work.cancelled() or work.exception() is not None:
            return
        self.release(work.result())

    def _prepare_sync(self, path: Path) -> Artifact:
        try:
            fp = path.open("rb")
        except OSError as e:
            raise InvalidReferenceError(f"Cannot read image file: {e}", reference=str(path)) from e

        try:
            with fp, Image.open(fp) as img:
                source_format = img.format
                pixel_size = ImageSize(*img.size)
                orientation = _read_orientation(img)

                if pixel_size.longer_edge <= self._max_dimension:
                    img.load()
                    return OriginalArtifact(
                        path=path,
                        image_size=upright_size(pixel_size, orientation),
                        pixel_size=pixel_size,
                        orientation=orientation,
                    )

                target = scaled_size(pixel_size, self._max_dimension)
                # JPEG can decode at a reduced scale; other formats ignore this
                img.draft(img.mode, (target.width, target.height))
                resized = img.resize((target.width, target.height), Image.Resampling.LANCZOS)
        except _DECODE_ERRORS as e:
            raise UnreadableDataError(f"Cannot decode image: {e}", path=str(path)) from e

        derived_path = self._write_derived(resized, derived_format(source_format))
        return DerivedArtifact(
            path=derived_path,
            image_size=upright_size(pixel_size, orientation),
            pixel_size=target,
            orientation=orientation,
            source=path,
        )


    def _write_derived(self, img: Image.Image, image_format: str) -> Path:
        """Write ``img`` to a fresh, uniquely named temp file.

        The file is removed again if writing fails part-way.
        """
        try:
            fd, name = tempfile.mkstemp(
                prefix=self._temp_prefix,
                suffix=_DERIVED_SUFFIXES[image_format],
                dir=self._temp_dir,
            )
        except OSError as e:
            raise ExtractionFailureError(f"Cannot create temporary file: {e}") from e

        derived_path = Path(name)
        try:
            with os.fdopen(fd, "wb") as f:
                _to_savable_mode(img, image_format).save(f, format=image_format)
        except Exception as e:
            derived_path.unlink(missing_ok=True)
            raise ExtractionFailureError(f"Cannot write resized image: {e}") from e

        return derived_path


def _read_orientation(img: Image.Image) -> int:
    orientation = img.getexif().get(_EXIF_ORIENTATION_TAG, 1)
    try:
        orientation = int(orientation)
    except (TypeError, ValueError):
        return 1
    return orientation if 1 <= orientation <= 8 else 1


def derived_format(source_format: str | None) -> str:
    """Pillow format name a downscaled copy of ``source_format`` is saved in."""
    return source_format if source_format in _DERIVED_SUFFIXES else "PNG"


def _to_savable_mode(img: Image.Image, image_format: str) -> Image.Image:
    # JPEG has no alpha or palette support
    if image_format == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        return img.convert("RGB")
    return img
