"""Tests for the CLIP embeddings client."""

import base64
import io
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from image_insight.clients.embeddings import ClipEmbeddingClient, chunked, clip_image_payload
from image_insight.config import settings


def gateway_response(*vectors: list[float]) -> SimpleNamespace:
    """Shape of an openai CreateEmbeddingResponse, reduced to ``data``."""
    return SimpleNamespace(data=[SimpleNamespace(embedding=v) for v in vectors])


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> ClipEmbeddingClient:
    """Client whose /embeddings call is an AsyncMock."""
    client = ClipEmbeddingClient(base_url="http://localhost:9/v1", model="clip-test", max_batch=2)
    monkeypatch.setattr(client._client.embeddings, "create", AsyncMock())
    return client


class TestClipImagePayload:
    def test_bytes_are_base64_encoded(self) -> None:
        assert clip_image_payload(b"pixels") == {"image": base64.b64encode(b"pixels").decode("ascii")}

    def test_strings_pass_through(self) -> None:
        assert clip_image_payload("https://example.com/a.png") == {"image": "https://example.com/a.png"}


class TestChunked:
    def test_with_remainder(self) -> None:
        assert chunked([1, 2, 3, 4, 5], 3) == [[1, 2, 3], [4, 5]]

    def test_exact_division(self) -> None:
        assert chunked([1, 2, 3, 4], 2) == [[1, 2], [3, 4]]


class TestClipEmbeddingClient:
    async def test_empty_inputs_skip_the_gateway(self, client: ClipEmbeddingClient) -> None:
        assert await client.embed_images([]) == []
        assert await client.embed_prompts([]) == []
        client._client.embeddings.create.assert_not_awaited()

    def test_model_defaults_to_settings(self) -> None:
        client = ClipEmbeddingClient(base_url="http://localhost:9/v1")
        assert client.model == settings.model_image_embedding

    async def test_images_sent_as_structured_input(self, client: ClipEmbeddingClient) -> None:
        client._client.embeddings.create.return_value = gateway_response([0.1, 0.2])

        vectors = await client.embed_images([b"jpeg"])

        assert vectors == [[0.1, 0.2]]
        kwargs = client._client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "clip-test"
        assert kwargs["input"] == [{"image": base64.b64encode(b"jpeg").decode("ascii")}]

    async def test_prompts_batched_in_order(self, client: ClipEmbeddingClient) -> None:
        client._client.embeddings.create.side_effect = [
            gateway_response([1.0], [2.0]),
            gateway_response([3.0], [4.0]),
            gateway_response([5.0]),
        ]

        vectors = await client.embed_prompts([f"a photo of {i}" for i in range(5)])

        assert vectors == [[1.0], [2.0], [3.0], [4.0], [5.0]]
        assert client._client.embeddings.create.await_count == 3
        first_call = client._client.embeddings.create.await_args_list[0]
        assert first_call.kwargs["input"] == ["a photo of 0", "a photo of 1"]

    async def test_short_response_is_an_error(self, client: ClipEmbeddingClient) -> None:
        client._client.embeddings.create.return_value = gateway_response([1.0])

        with pytest.raises(RuntimeError, match="1 vectors for 2 prompt"):
            await client.embed_prompts(["a", "b"])


@pytest.mark.integration
class TestClipEmbeddingClientIntegration:
    """Needs a running CLIP embeddings gateway.

    Run with: SCENE_CLASSIFIER_BASE_URL=http://localhost:8000/v1 pytest -m integration
    """

    async def test_image_and_prompt_share_dimensions(self) -> None:
        if not settings.scene_classifier_base_url:
            pytest.skip("SCENE_CLASSIFIER_BASE_URL not set")

        buffer = io.BytesIO()
        Image.new("RGB", (64, 64), color="blue").save(buffer, format="PNG")

        client = ClipEmbeddingClient()
        [image_vector] = await client.embed_images([buffer.getvalue()])
        [prompt_vector] = await client.embed_prompts(["a blue square"])

        assert len(image_vector) == len(prompt_vector)
