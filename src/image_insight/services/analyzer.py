"""End-to-end image analysis: preprocess → extract → rank.

``VisionAnalyzer`` is the display-consumer entry point. It propagates
``AnalysisError`` to the caller; the tool surface wraps it and converts
errors into report envelopes instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from image_insight.errors import NoCategoriesRequestedError
from image_insight.extraction.orchestrator import ExtractionOrchestrator
from image_insight.models.enums import AnalysisCategory
from image_insight.models.features import AnalysisResults
from image_insight.preprocessing.preprocessor import ImagePreprocessor
from image_insight.reporting.formatter import format_report
from image_insight.reporting.schemas import VisionAnalysisReport
from image_insight.services.text_ranking import rank_text_results
from image_insight.utils.categories import parse_categories
from image_insight.utils.references import ImageReference

logger = logging.getLogger(__name__)


class VisionAnalyzer:
    """Analyze one image for the requested categories.

    Usage:
        analyzer = VisionAnalyzer()
        results = await analyzer.analyze("/photos/menu.jpg", ["text", "objects"])
        for item in results.text:
            print(item.priority, item.text)
    """

    def __init__(
        self,
        preprocessor: ImagePreprocessor | None = None,
        orchestrator: ExtractionOrchestrator | None = None,
    ) -> None:
        self._preprocessor = preprocessor or ImagePreprocessor()
        self._orchestrator = orchestrator or ExtractionOrchestrator()

    @property
    def preprocessor(self) -> ImagePreprocessor:
        return self._preprocessor

    @property
    def orchestrator(self) -> ExtractionOrchestrator:
        return self._orchestrator

    async def analyze(
        self,
        reference: ImageReference,
        categories: Iterable[str | AnalysisCategory],
        include_confidence: bool = True,
    ) -> AnalysisResults:
        """Analyze an image and rank its text by prominence.

        Args:
            reference: Local path, ``file://`` URI or path-like string.
            categories: Category tokens ("text", "objects", "scenes", …) or
                AnalysisCategory members. Unknown tokens are dropped.
            include_confidence: Whether reports should render confidence.

        Returns:
            Immutable AnalysisResults; text results carry priorities.

        Raises:
            NoCategoriesRequestedError: No valid category was requested.
            InvalidReferenceError: Reference does not resolve to a file.
            UnreadableDataError: Pixel data cannot be decoded.
            ExtractionFailureError: The image could not be analyzed.
        """
        requested = parse_categories(categories)
        if not requested:
            raise NoCategoriesRequestedError()

        async with self._preprocessor.prepared(reference) as artifact:
            results = await self._orchestrator.analyze(
                artifact, requested, include_confidence=include_confidence
            )

        if results.text:
            results = results.with_text(rank_text_results(results.text, artifact.image_size))

        logger.debug(
            "Analyzed %s: %d item(s), %d failed categor(ies)",
            artifact.path.name,
            results.result_count,
            len(results.failures),
        )
        return results

    async def analyze_report(
        self,
        reference: ImageReference,
        categories: Iterable[str | AnalysisCategory],
        include_confidence: bool = True,
    ) -> VisionAnalysisReport:
        """Analyze an image and format the success report.

        Raises the same errors as ``analyze``.
        """
        results = await self.analyze(reference, categories, include_confidence)
        return format_report(results)
