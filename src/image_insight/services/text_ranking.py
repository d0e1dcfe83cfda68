"""Text importance ranking by visual prominence.

Taller text is assumed to be more important: headlines outrank captions.
Heights are measured in pixels of the analyzed image, so ranks are only
comparable within one image.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from image_insight.config import settings
from image_insight.models.features import TextResult
from image_insight.models.geometry import ImageSize, NormalizedRect


def rank_text_results(
    text_results: Sequence[TextResult],
    image_size: ImageSize,
    *,
    point_size_multiplier: float | None = None,
) -> list[TextResult]:
    """Assign priorities to text results by rendered height.

    Results are sorted by ``box.height * image_size.height`` (descending).
    The first gets priority 1; a result whose height equals the previous
    one shares its priority, otherwise its priority is its 1-based position.
    Heights [10, 10, 8, 8, 8, 5] rank as [1, 1, 3, 3, 3, 6].

    Args:
        text_results: Recognized text, in any order.
        image_size: Pixel size of the image the boxes are relative to.
        point_size_multiplier: Pixel height → point size factor
            (defaults to settings.point_size_multiplier, i.e. 72 DPI).

    Returns:
        New TextResults ordered by priority, with ``priority``,
        ``estimated_point_size`` and ``height_in_pixels`` filled in.
    """
    multiplier = (
        point_size_multiplier
        if point_size_multiplier is not None
        else settings.point_size_multiplier
    )

    scored = [(result.box.height * image_size.height, result) for result in text_results]
    # Tie order must not depend on input order
    scored.sort(key=lambda item: (-item[0], item[1].text, item[1].box.y, item[1].box.x))

    ranked: list[TextResult] = []
    priority = 1
    previous_height: float | None = None
    for position, (height, result) in enumerate(scored, start=1):
        if previous_height is not None and height != previous_height:
            priority = position
        ranked.append(
            dataclasses.replace(
                result,
                priority=priority,
                estimated_point_size=height * multiplier,
                height_in_pixels=height,
            )
        )
        previous_height = height

    return ranked


def area_per_character(box: NormalizedRect, text: str, image_size: ImageSize) -> float:
    """Text area in square pixels divided by its character count (min 1)."""
    area = box.width * box.height * image_size.width * image_size.height
    return area / max(1, len(text))
