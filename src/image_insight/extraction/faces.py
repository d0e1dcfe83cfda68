"""Face detection capability using OpenCV's bundled Haar cascades.

Faces come from the frontal-face cascade. Landmarks are searched inside each
face: eyes in the upper half, mouth (smile cascade) in the lower half. No
nose cascade ships with OpenCV, so ``nose`` stays None.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import cv2
import numpy as np

from image_insight.config import settings
from image_insight.errors import CapabilityUnavailableError
from image_insight.extraction.base import load_upright_array
from image_insight.models.features import FaceLandmarks, FaceResult
from image_insight.models.geometry import NormalizedPoint, NormalizedRect

_FACE_CASCADE = "haarcascade_frontalface_default.xml"
_EYE_CASCADE = "haarcascade_eye.xml"
_SMILE_CASCADE = "haarcascade_smile.xml"


class HaarFaceDetector:
    """Detect faces and coarse landmarks."""

    name = "opencv-haar"

    def __init__(self, min_size: int | None = None, cascade_dir: Path | None = None) -> None:
        self._min_size = min_size or settings.face_min_size
        self._cascade_dir = cascade_dir or Path(cv2.data.haarcascades)
        # One cascade cache per worker thread; CascadeClassifier is not thread-safe
        self._local = threading.local()

    async def extract(self, path: Path, *, orientation: int = 1) -> list[FaceResult]:
        return await asyncio.to_thread(self._detect, path, orientation)

    def _cascade(self, filename: str) -> cv2.CascadeClassifier:
        cascades: dict[str, cv2.CascadeClassifier] = self._local.__dict__.setdefault("cascades", {})
        cascade = cascades.get(filename)
        if cascade is None:
            cascade = cv2.CascadeClassifier(str(self._cascade_dir / filename))
            if cascade.empty():
                raise CapabilityUnavailableError(f"Haar cascade not found: {filename}")
            cascades[filename] = cascade
        return cascade

    def _detect(self, path: Path, orientation: int) -> list[FaceResult]:
        bgr, size = load_upright_array(path, orientation)
        gray = cv2.equalizeHist(cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY))

        faces = self._cascade(_FACE_CASCADE).detectMultiScale(
            gray,
            scaleFactor=1.1,
            minNeighbors=5,
            minSize=(self._min_size, self._min_size),
        )

        results: list[FaceResult] = []
        for x, y, w, h in faces:
            roi = gray[y : y + h, x : x + w]
            results.append(
                FaceResult(
                    box=NormalizedRect.from_pixel_box(x, y, w, h, size),
                    landmarks=self._landmarks(roi),
                )
            )
        return results

    def _landmarks(self, face: np.ndarray) -> FaceLandmarks | None:
        h, w = face.shape[:2]
        half = h // 2

        eyes = self._cascade(_EYE_CASCADE).detectMultiScale(
            face[:half, :], scaleFactor=1.1, minNeighbors=5
        )
        # Keep the two largest, then order by x so "left" is image-left
        eye_boxes = sorted(eyes, key=lambda b: b[2] * b[3], reverse=True)[:2]
        eye_points = sorted(
            (_center_point(ex, ey, ew, eh, w, h) for ex, ey, ew, eh in eye_boxes),
            key=lambda p: p.x,
        )

        mouths = self._cascade(_SMILE_CASCADE).detectMultiScale(
            face[half:, :], scaleFactor=1.5, minNeighbors=15
        )
        mouth = None
        if len(mouths):
            mx, my, mw, mh = max(mouths, key=lambda b: b[2] * b[3])
            mouth = _center_point(mx, my + half, mw, mh, w, h)

        if not eye_points and mouth is None:
            return None

        return FaceLandmarks(
            left_eye=eye_points[0] if eye_points else None,
            right_eye=eye_points[1] if len(eye_points) > 1 else None,
            mouth=mouth,
        )


def _center_point(x: int, y: int, w: int, h: int, face_w: int, face_h: int) -> NormalizedPoint:
    """Center of a pixel box as a face-relative, bottom-left-origin point."""
    cx = (x + w / 2) / face_w
    cy = (y + h / 2) / face_h
    return NormalizedPoint(x=cx, y=1.0 - cy)
