"""Feature extraction orchestrator.

Dispatches one artifact to the capability of every requested category,
runs them concurrently and merges their output into one AnalysisResults.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from image_insight.config import settings
from image_insight.errors import (
    CapabilityUnavailableError,
    CorruptImageError,
    ExtractionFailureError,
    NoCategoriesRequestedError,
)
from image_insight.extraction.barcodes import OpenCVBarcodeReader
from image_insight.extraction.base import Capability
from image_insight.extraction.classification import ZeroShotSceneClassifier
from image_insight.extraction.faces import HaarFaceDetector
from image_insight.extraction.saliency import SpectralResidualSaliency
from image_insight.extraction.text import TesseractTextRecognizer
from image_insight.models.enums import AnalysisCategory
from image_insight.models.features import AnalysisResults, slot_name
from image_insight.preprocessing.artifacts import Artifact

logger = logging.getLogger(__name__)


def default_capabilities() -> dict[AnalysisCategory, Capability]:
    """Capabilities backed by Tesseract, OpenCV and (optionally) CLIP."""
    return {
        AnalysisCategory.TEXT: TesseractTextRecognizer(),
        AnalysisCategory.FACES: HaarFaceDetector(),
        AnalysisCategory.OBJECTS_AND_SCENES: ZeroShotSceneClassifier(),
        AnalysisCategory.BARCODES: OpenCVBarcodeReader(),
        AnalysisCategory.SALIENCY: SpectralResidualSaliency(),
    }


class ExtractionOrchestrator:
    """Run the capabilities for the requested categories on one artifact.

    The orchestrator:
    1. Rejects an empty category set before touching any capability
    2. Starts one extraction per distinct capability, concurrently
    3. Records a per-category failure without discarding other categories
    4. Aborts the whole call when a capability reports corrupt pixels,
       once the other capabilities have let go of the artifact

    Usage:
        orchestrator = ExtractionOrchestrator()
        results = await orchestrator.analyze(artifact, {AnalysisCategory.TEXT})
    """

    def __init__(self, capabilities: Mapping[AnalysisCategory, Capability] | None = None) -> None:
        self._capabilities = dict(capabilities) if capabilities is not None else default_capabilities()

    @property
    def capabilities(self) -> Mapping[AnalysisCategory, Capability]:
        return self._capabilities

    async def analyze(
        self,
        artifact: Artifact,
        categories: Iterable[AnalysisCategory],
        include_confidence: bool = True,
    ) -> AnalysisResults:
        """Extract features for ``categories`` from ``artifact``.

        Args:
            artifact: Prepared image (original or derived).
            categories: Categories to extract; must not be empty.
            include_confidence: Carried through to presentation.

        Returns:
            AnalysisResults with one slot filled per requested category.
            Categories whose capability failed are empty and listed in
            ``failures``.

        Raises:
            NoCategoriesRequestedError: ``categories`` is empty.
            ExtractionFailureError: The image could not be analyzed at all.
        """
        requested = frozenset(categories)
        if not requested:
            raise NoCategoriesRequestedError()

        # Several categories may share one capability object; call it once
        groups: dict[int, tuple[Capability, list[AnalysisCategory]]] = {}
        failures: dict[AnalysisCategory, str] = {}
        for category in sorted(requested, key=_category_order):
            capability = self._capabilities.get(category)
            if capability is None:
                failures[category] = f"No capability configured for {category.display_name}"
                continue
            groups.setdefault(id(capability), (capability, []))[1].append(category)

        tasks = [
            asyncio.create_task(self._run(capability, artifact, group_categories))
            for capability, group_categories in groups.values()
        ]

        # Capability threads cannot be interrupted: every exit path waits for
        # all tasks so the artifact outlives them
        try:
            outcomes = await asyncio.shield(asyncio.gather(*tasks))
        except CorruptImageError as e:
            await _settle(tasks)
            raise ExtractionFailureError(f"Image could not be analyzed: {e}") from e
        except asyncio.CancelledError:
            await _settle(tasks)
            raise

        slots: dict[str, tuple[Any, ...]] = {}
        for (capability, group_categories), outcome in zip(groups.values(), outcomes):
            if isinstance(outcome, Exception):
                message = _failure_message(capability, outcome)
                for category in group_categories:
                    failures[category] = message
                continue

            for category in group_categories:
                slots[slot_name(category)] = tuple(outcome)

        return AnalysisResults(
            requested=requested,
            image_size=artifact.image_size,
            include_confidence=include_confidence,
            failures=failures,
            **slots,
        )

    async def _run(
        self,
        capability: Capability,
        artifact: Artifact,
        categories: Sequence[AnalysisCategory],
    ) -> Sequence[Any] | Exception:
        """Run one capability; its ordinary failures come back as the value.

        CorruptImageError propagates so that gather() fails fast.
        """
        start_time = time.time()
        try:
            results = await capability.extract(artifact.path, orientation=artifact.orientation)
        except CorruptImageError:
            raise
        except Exception as e:
            return e

        elapsed = (time.time() - start_time) * 1000  # ms
        logger.log(
            logging.INFO if settings.log_extractor_calls else logging.DEBUG,
            "[EXTRACT] %s for %s → %d result(s) (%.0fms)",
            capability.name,
            ", ".join(c.value for c in categories),
            len(results),
            elapsed,
        )
        return results


def _category_order(category: AnalysisCategory) -> int:
    return list(AnalysisCategory).index(category)


async def _settle(tasks: Sequence[asyncio.Task[Any]]) -> None:
    """Wait for every task to finish, whatever its outcome."""
    await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))


def _failure_message(capability: Capability, error: BaseException) -> str:
    if isinstance(error, CapabilityUnavailableError):
        logger.warning("[EXTRACT] %s unavailable: %s", capability.name, error)
        return f"{capability.name} unavailable: {error}"

    logger.warning("[EXTRACT] %s failed: %s", capability.name, error, exc_info=error)
    return f"{capability.name} failed: {error}"
