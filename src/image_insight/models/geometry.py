"""Geometry value objects.

All normalized geometry uses unit coordinates (0..1 on both axes) with the
origin at the bottom-left of the upright image. Consumers that render with a
top-left origin must flip the y axis themselves; nothing here pre-flips.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ImageSize:
    """Pixel dimensions of an image."""

    width: int
    height: int

    @property
    def longer_edge(self) -> int:
        return max(self.width, self.height)

    def transposed(self) -> ImageSize:
        return ImageSize(self.height, self.width)


@dataclass(frozen=True, slots=True)
class NormalizedPoint:
    """Point in unit coordinates, bottom-left origin."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class NormalizedRect:
    """Axis-aligned box in unit coordinates, bottom-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def from_pixel_box(
        cls,
        left: float,
        top: float,
        width: float,
        height: float,
        image_size: ImageSize,
    ) -> NormalizedRect:
        """Convert a top-left-origin pixel box into a normalized rect."""
        img_w = float(image_size.width) or 1.0
        img_h = float(image_size.height) or 1.0
        return cls(
            x=left / img_w,
            y=1.0 - (top + height) / img_h,
            width=width / img_w,
            height=height / img_h,
        )

    def to_pixel_rect(self, image_size: ImageSize) -> tuple[float, float, float, float]:
        """Return (left, top, width, height) in top-left-origin pixels."""
        return (
            self.x * image_size.width,
            (1.0 - self.max_y) * image_size.height,
            self.width * image_size.width,
            self.height * image_size.height,
        )
