"""Feature extraction module.

Main entry point:
    from image_insight.extraction import ExtractionOrchestrator

    orchestrator = ExtractionOrchestrator()
    results = await orchestrator.analyze(artifact, {AnalysisCategory.TEXT})

Default capabilities:
    TesseractTextRecognizer, HaarFaceDetector, ZeroShotSceneClassifier,
    OpenCVBarcodeReader, SpectralResidualSaliency
"""

from image_insight.extraction.barcodes import OpenCVBarcodeReader
from image_insight.extraction.base import Capability
from image_insight.extraction.classification import ZeroShotSceneClassifier
from image_insight.extraction.faces import HaarFaceDetector
from image_insight.extraction.orchestrator import ExtractionOrchestrator, default_capabilities
from image_insight.extraction.saliency import SpectralResidualSaliency
from image_insight.extraction.text import TesseractTextRecognizer

__all__ = [
    "Capability",
    "ExtractionOrchestrator",
    "default_capabilities",
    "HaarFaceDetector",
    "OpenCVBarcodeReader",
    "SpectralResidualSaliency",
    "TesseractTextRecognizer",
    "ZeroShotSceneClassifier",
]
