"""Utility modules for ImageInsight."""

from image_insight.utils.categories import VALID_TOKENS, parse_categories, parse_category
from image_insight.utils.references import ImageReference, resolve_reference

__all__ = [
    "VALID_TOKENS",
    "ImageReference",
    "parse_categories",
    "parse_category",
    "resolve_reference",
]
