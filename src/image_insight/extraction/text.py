"""Text recognition capability.

Runs Tesseract over the upright image and groups word boxes into lines
(one TextResult per block/paragraph/line triple).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytesseract

from image_insight.config import settings
from image_insight.errors import CapabilityUnavailableError
from image_insight.extraction.base import load_upright_image
from image_insight.models.features import TextResult
from image_insight.models.geometry import ImageSize, NormalizedRect


class TesseractTextRecognizer:
    """Recognize lines of text with Tesseract.

    Line confidence is the mean of its word confidences, scaled to [0,1].
    """

    name = "tesseract"

    def __init__(
        self,
        languages: str | None = None,
        config: str | None = None,
        tesseract_cmd: str | None = None,
    ) -> None:
        self._languages = languages or settings.tesseract_languages
        self._config = config if config is not None else settings.tesseract_config
        tesseract_cmd = tesseract_cmd or settings.tesseract_cmd
        if tesseract_cmd:
            # Process-wide in pytesseract
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    async def extract(self, path: Path, *, orientation: int = 1) -> list[TextResult]:
        return await asyncio.to_thread(self._recognize, path, orientation)

    def _recognize(self, path: Path, orientation: int) -> list[TextResult]:
        img = load_upright_image(path, orientation)

        try:
            data = pytesseract.image_to_data(
                img,
                lang=self._languages,
                config=self._config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise CapabilityUnavailableError("Tesseract is not installed or not on PATH") from e

        return group_words_into_lines(data, ImageSize(img.width, img.height))


def group_words_into_lines(data: dict[str, list[Any]], image_size: ImageSize) -> list[TextResult]:
    """Merge Tesseract word rows into line-level TextResults.

    Args:
        data: ``image_to_data`` output in DICT form.
        image_size: Size of the image Tesseract saw.

    Returns:
        One TextResult per line, in reading order.
    """
    n = len(data.get("text", []))
    lines: dict[tuple[int, int, int], dict[str, Any]] = {}

    for idx in range(n):
        word = (data["text"][idx] or "").strip()
        try:
            confidence = float(data.get("conf", ["-1"] * n)[idx])
        except (TypeError, ValueError):
            confidence = -1.0

        # conf == -1 marks structural rows (page/block/paragraph), not words
        if not word or confidence < 0:
            continue

        left = int(data["left"][idx])
        top = int(data["top"][idx])
        width = int(data["width"][idx])
        height = int(data["height"][idx])
        if width <= 0 or height <= 0:
            continue

        key = (
            int(data.get("block_num", [0] * n)[idx]),
            int(data.get("par_num", [0] * n)[idx]),
            int(data.get("line_num", [0] * n)[idx]),
        )
        entry = lines.setdefault(
            key,
            {"words": [], "confs": [], "left": left, "top": top, "right": 0, "bottom": 0},
        )
        entry["words"].append(word)
        entry["confs"].append(confidence)
        entry["left"] = min(entry["left"], left)
        entry["top"] = min(entry["top"], top)
        entry["right"] = max(entry["right"], left + width)
        entry["bottom"] = max(entry["bottom"], top + height)

    results: list[TextResult] = []
    for entry in lines.values():
        mean_conf = sum(entry["confs"]) / len(entry["confs"])
        box = NormalizedRect.from_pixel_box(
            entry["left"],
            entry["top"],
            entry["right"] - entry["left"],
            entry["bottom"] - entry["top"],
            image_size,
        )
        results.append(
            TextResult(
                text=" ".join(entry["words"]),
                confidence=min(1.0, max(0.0, mean_conf / 100.0)),
                box=box,
            )
        )

    return results
