"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from walletwise.config import EmbeddingSettings, get_settings
from walletwise.embeddings.models import EmbeddingResult
from walletwise.exceptions import EmbeddingError, ErrorCode
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None



class HuggingFaceEmbeddingService(EmbeddingService):
    """Embedding service backed by the HuggingFace Inference API.

    Sends `{"inputs": ...}` to the model's feature-extraction endpoint
    and reads back the vector for the query text.
    """

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HuggingFace embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def endpoint(self) -> str:
        """Feature-extraction URL for the configured model."""
        return f"{self._settings.base_url.rstrip('/')}/{self._settings.model}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = self._settings.api_key.get_secret_value()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
        """
        client = await self._get_client()
        vectors = await self._request(client, text)

        if len(vectors) != 1:
            raise EmbeddingError(
                f"Expected 1 embedding, got {len(vectors)}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"expected": 1, "received": len(vectors)},
            )

        return EmbeddingResult(
            text=text,
            embedding=vectors[0],
            model=self._settings.model,
            dimensions=len(vectors[0]),
        )

    async def _request(self, client: httpx.AsyncClient, text: str) -> list[list[float]]:
        """Make one feature-extraction request.

        Raises:
            EmbeddingError: If the request or response is bad.
        """
        url = self.endpoint
        start = time.perf_counter()

        try:
            response = await client.post(
                url,
                json={"inputs": text},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, success=False)
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, success=False)
            logger.error(
                f"Embedding request error: {e}",
                extra={"url": url},
            )
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        track_embedding_request(self.model_name, time.perf_counter() - start)

        try:
            return self._parse_vectors(response.json())
        except (TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

    def _parse_vectors(self, data: Any) -> list[list[float]]:
        """Normalize the response body to a list of float vectors."""
        if not isinstance(data, list) or not data:
            raise ValueError("expected a non-empty list of embeddings")

        # A single input may come back as one flat vector
        if all(isinstance(x, (int, float)) for x in data):
            return [[float(x) for x in data]]

        vectors: list[list[float]] = []
        for item in data:
            if not isinstance(item, list):
                raise ValueError("embedding is not a list of numbers")
            vectors.append([float(x) for x in item])
        return vectors
