"""Barcode and QR code reading capability (OpenCV)."""

from __future__ import annotations

import asyncio
from pathlib import Path

import cv2
import numpy as np

from image_insight.extraction.base import load_upright_array
from image_insight.models.features import BarcodeResult
from image_insight.models.geometry import ImageSize, NormalizedRect


class OpenCVBarcodeReader:
    """Decode QR codes and 1D barcodes.

    QR codes use ``cv2.QRCodeDetector``; linear symbologies (EAN, UPC, …)
    use ``cv2.barcode.BarcodeDetector`` when the installed OpenCV has it.
    """

    name = "opencv-barcode"

    async def extract(self, path: Path, *, orientation: int = 1) -> list[BarcodeResult]:
        return await asyncio.to_thread(self._read, path, orientation)

    def _read(self, path: Path, orientation: int) -> list[BarcodeResult]:
        bgr, size = load_upright_array(path, orientation)

        results = self._read_qr(bgr, size)
        if hasattr(cv2, "barcode"):
            results.extend(self._read_linear(bgr, size))
        return results

    def _read_qr(self, bgr: np.ndarray, size: ImageSize) -> list[BarcodeResult]:
        ok, decoded, points, _ = cv2.QRCodeDetector().detectAndDecodeMulti(bgr)
        if not ok or points is None:
            return []

        return [
            BarcodeResult(payload=payload, symbology="QR", box=_quad_to_rect(quad, size))
            for payload, quad in zip(decoded, points)
            if payload
        ]

    def _read_linear(self, bgr: np.ndarray, size: ImageSize) -> list[BarcodeResult]:
        detector = cv2.barcode.BarcodeDetector()
        ok, decoded, types, points = detector.detectAndDecodeWithType(bgr)
        if not ok or points is None:
            return []

        return [
            BarcodeResult(payload=payload, symbology=symbology, box=_quad_to_rect(quad, size))
            for payload, symbology, quad in zip(decoded, types, points)
            if payload
        ]


def _quad_to_rect(quad: np.ndarray, size: ImageSize) -> NormalizedRect:
    """Axis-aligned normalized box around a detector quadrilateral."""
    xs = quad[:, 0]
    ys = quad[:, 1]
    left = float(max(0.0, xs.min()))
    top = float(max(0.0, ys.min()))
    right = float(min(size.width, xs.max()))
    bottom = float(min(size.height, ys.max()))
    return NormalizedRect.from_pixel_box(left, top, right - left, bottom - top, size)
