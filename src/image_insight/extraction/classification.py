"""Object & scene classification via CLIP zero-shot labels.

The image and a prompt per label ("a photo of {label}") are embedded into
CLIP space; softmax over scaled cosine similarities gives label confidences.
"""

from __future__ import annotations

import asyncio
import io
from collections.abc import Sequence
from pathlib import Path

import numpy as np

from image_insight.clients.embeddings import ClipEmbeddingClient
from image_insight.config import settings
from image_insight.errors import CapabilityUnavailableError
from image_insight.extraction.base import load_upright_image
from image_insight.models.features import ObjectResult

# CLIP's learned logit scale
_LOGIT_SCALE = 100.0

# Gateway-side preprocessing resizes anyway; keep the upload small
_UPLOAD_MAX_DIMENSION = 1024


class ZeroShotSceneClassifier:
    """Classify objects and scenes against a fixed label vocabulary."""

    name = "clip-zero-shot"

    def __init__(
        self,
        client: ClipEmbeddingClient | None = None,
        labels: Sequence[str] | None = None,
        min_confidence: float | None = None,
    ) -> None:
        self._client = client
        self._labels = list(labels or settings.scene_labels)
        self._min_confidence = (
            min_confidence if min_confidence is not None else settings.scene_min_confidence
        )
        self._label_matrix: np.ndarray | None = None

    async def extract(self, path: Path, *, orientation: int = 1) -> list[ObjectResult]:
        client = self._get_client()

        image_bytes = await asyncio.to_thread(_encode_for_upload, path, orientation)
        [image_vector] = await client.embed_images([image_bytes])

        label_matrix = await self._get_label_matrix(client)
        probabilities = zero_shot_probabilities(np.asarray(image_vector), label_matrix)

        return [
            ObjectResult(identifier=label, confidence=float(p))
            for label, p in zip(self._labels, probabilities)
            if p >= self._min_confidence
        ]

    def _get_client(self) -> ClipEmbeddingClient:
        if self._client is None:
            if not settings.scene_classifier_base_url:
                raise CapabilityUnavailableError(
                    "Object & scene classification needs SCENE_CLASSIFIER_BASE_URL"
                )
            self._client = ClipEmbeddingClient()
        return self._client

    async def _get_label_matrix(self, client: ClipEmbeddingClient) -> np.ndarray:
        if self._label_matrix is None:
            prompts = [f"a photo of {label.replace('_', ' ')}" for label in self._labels]
            embeddings = await client.embed_prompts(prompts)
            self._label_matrix = np.asarray(embeddings, dtype=np.float64)
        return self._label_matrix


def zero_shot_probabilities(image_embedding: np.ndarray, label_matrix: np.ndarray) -> np.ndarray:
    """Softmax over scaled cosine similarity between an image and each label."""
    image = image_embedding / np.linalg.norm(image_embedding)
    labels = label_matrix / np.linalg.norm(label_matrix, axis=1, keepdims=True)
    logits = _LOGIT_SCALE * (labels @ image)
    logits -= logits.max()
    exp = np.exp(logits)
    return exp / exp.sum()


def _encode_for_upload(path: Path, orientation: int) -> bytes:
    img = load_upright_image(path, orientation)
    img.thumbnail((_UPLOAD_MAX_DIMENSION, _UPLOAD_MAX_DIMENSION))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()
