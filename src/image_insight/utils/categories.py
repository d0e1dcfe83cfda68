"""Request-token canonicalization for analysis categories.

Callers (the tool surface in particular) send free-form tokens. "objects" and
"scenes" are historically distinct request names for one category; both are
folded onto AnalysisCategory.OBJECTS_AND_SCENES here, before dispatch, so the
orchestrator only ever sees a set of canonical categories.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Final

from image_insight.models.enums import AnalysisCategory

logger = logging.getLogger(__name__)

_TOKEN_MAP: Final[dict[str, AnalysisCategory]] = {
    "text": AnalysisCategory.TEXT,
    "faces": AnalysisCategory.FACES,
    "objects": AnalysisCategory.OBJECTS_AND_SCENES,
    "scenes": AnalysisCategory.OBJECTS_AND_SCENES,
    "objects-and-scenes": AnalysisCategory.OBJECTS_AND_SCENES,
    "objects_and_scenes": AnalysisCategory.OBJECTS_AND_SCENES,
    "barcodes": AnalysisCategory.BARCODES,
    "saliency": AnalysisCategory.SALIENCY,
}

VALID_TOKENS: Final[tuple[str, ...]] = (
    "text",
    "faces",
    "objects",
    "scenes",
    "barcodes",
    "saliency",
)


def parse_category(token: str | AnalysisCategory) -> AnalysisCategory | None:
    """Map one request token to its canonical category, or None if unknown."""
    if isinstance(token, AnalysisCategory):
        return token
    return _TOKEN_MAP.get(token.strip().lower())


def parse_categories(tokens: Iterable[str | AnalysisCategory]) -> frozenset[AnalysisCategory]:
    """Parse request tokens leniently into a set of canonical categories.

    Entries may themselves be comma-separated ("text, faces"). Unrecognized
    tokens are dropped; an empty result is left for the caller to reject.
    """
    categories: set[AnalysisCategory] = set()

    for token in tokens:
        parts = [token] if isinstance(token, AnalysisCategory) else token.split(",")
        for part in parts:
            if isinstance(part, str) and not part.strip():
                continue
            category = parse_category(part)
            if category is None:
                logger.debug("Dropping unrecognized analysis type %r", part)
                continue
            categories.add(category)

    return frozenset(categories)
