"""Image preprocessing: reference resolution, downscaling, artifact cleanup."""

from image_insight.preprocessing.artifacts import Artifact, DerivedArtifact, OriginalArtifact
from image_insight.preprocessing.preprocessor import ImagePreprocessor, scaled_size

__all__ = [
    "Artifact",
    "DerivedArtifact",
    "ImagePreprocessor",
    "OriginalArtifact",
    "scaled_size",
]
