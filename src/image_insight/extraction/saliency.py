"""Saliency capability: spectral-residual saliency map → salient regions."""

from __future__ import annotations

import asyncio
from pathlib import Path

import cv2
import numpy as np

from image_insight.config import settings
from image_insight.errors import CapabilityUnavailableError
from image_insight.extraction.base import load_upright_array
from image_insight.models.features import SaliencyResult
from image_insight.models.geometry import ImageSize, NormalizedRect


class SpectralResidualSaliency:
    """Find visually prominent regions.

    The saliency map is Otsu-thresholded; each external contour whose
    bounding box covers at least ``min_area_fraction`` of the image becomes
    one region. A single pass yields one SaliencyResult with all regions,
    largest first.
    """

    name = "opencv-saliency"

    def __init__(self, min_area_fraction: float | None = None) -> None:
        self._min_area_fraction = (
            min_area_fraction
            if min_area_fraction is not None
            else settings.saliency_min_area_fraction
        )

    async def extract(self, path: Path, *, orientation: int = 1) -> list[SaliencyResult]:
        return await asyncio.to_thread(self._detect, path, orientation)

    def _detect(self, path: Path, orientation: int) -> list[SaliencyResult]:
        if not hasattr(cv2, "saliency"):
            raise CapabilityUnavailableError("cv2.saliency needs the opencv-contrib build")

        bgr, size = load_upright_array(path, orientation)

        detector = cv2.saliency.StaticSaliencySpectralResidual_create()
        ok, saliency_map = detector.computeSaliency(bgr)
        if not ok:
            raise RuntimeError("Saliency map computation failed")

        return [SaliencyResult(boxes=tuple(regions_from_map(saliency_map, size, self._min_area_fraction)))]


def regions_from_map(
    saliency_map: np.ndarray,
    size: ImageSize,
    min_area_fraction: float,
) -> list[NormalizedRect]:
    """Threshold a [0,1] saliency map and box its salient regions."""
    scaled = np.clip(saliency_map * 255, 0, 255).astype("uint8")
    _, mask = cv2.threshold(scaled, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    min_area = min_area_fraction * size.width * size.height
    boxes: list[NormalizedRect] = []
    for contour in contours:
        x, y, w, h = cv2.boundingRect(contour)
        if w * h < min_area:
            continue
        boxes.append(NormalizedRect.from_pixel_box(x, y, w, h, size))

    boxes.sort(key=lambda box: box.area, reverse=True)
    return boxes
