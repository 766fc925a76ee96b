"""Embedding service module."""

from walletwise.embeddings.models import EmbeddingResult
from walletwise.embeddings.service import EmbeddingService, HuggingFaceEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "HuggingFaceEmbeddingService",
]
