"""Async client for a CLIP embeddings gateway (OpenAI-compatible ``/embeddings``).

Images and text prompts go to the same CLIP model, so both land in one
vector space and can be compared directly (zero-shot classification).
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Sequence
from typing import Any

from openai import AsyncOpenAI

from image_insight.config import settings

logger = logging.getLogger(__name__)


class ClipEmbeddingClient:
    """Embed images and label prompts with one CLIP model.

    Usage:
        client = ClipEmbeddingClient()
        [image_vec] = await client.embed_images([jpeg_bytes])
        label_vecs = await client.embed_prompts(["a photo of a beach"])
    """

    # Inputs per /embeddings request
    MAX_BATCH = 32

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        max_batch: int = MAX_BATCH,
    ) -> None:
        self._client = AsyncOpenAI(
            base_url=base_url or settings.scene_classifier_base_url,
            api_key=api_key or settings.scene_classifier_api_key,
        )
        self._model = model or settings.model_image_embedding
        self._max_batch = max_batch

    @property
    def model(self) -> str:
        return self._model

    async def embed_images(self, images: Sequence[bytes | str]) -> list[list[float]]:
        """Embed images given as raw bytes or as URL/base64 strings."""
        return await self._embed([clip_image_payload(image) for image in images], "image")

    async def embed_prompts(self, prompts: Sequence[str]) -> list[list[float]]:
        """Embed text prompts into the image space."""
        return await self._embed(list(prompts), "prompt")

    async def _embed(self, inputs: list[Any], kind: str) -> list[list[float]]:
        if not inputs:
            return []

        started = time.perf_counter()
        vectors: list[list[float]] = []
        for chunk in chunked(inputs, self._max_batch):
            response = await self._client.embeddings.create(
                model=self._model,
                input=chunk,  # type: ignore[arg-type]
            )
            vectors.extend(item.embedding for item in response.data)

        if len(vectors) != len(inputs):
            raise RuntimeError(
                f"Embedding gateway returned {len(vectors)} vectors for {len(inputs)} {kind}(s)"
            )

        if settings.log_extractor_calls:
            logger.info(
                "[EMBED] %s: %d %s(s) → %d-dim (%.0fms)",
                self._model,
                len(inputs),
                kind,
                len(vectors[0]),
                (time.perf_counter() - started) * 1000,
            )
        return vectors


def clip_image_payload(image: bytes | str) -> dict[str, str]:
    """Wrap one image in the structured input CLIP gateways expect."""
    if isinstance(image, bytes):
        image = base64.b64encode(image).decode("ascii")
    return {"image": image}


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    return [items[start : start + size] for start in range(0, len(items), size)]
