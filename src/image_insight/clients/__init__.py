"""Clients for external model gateways."""

from image_insight.clients.embeddings import ClipEmbeddingClient

__all__ = ["ClipEmbeddingClient"]
