"""LLM client interface and implementations."""

import time
from abc import ABC, abstractmethod

import httpx

from walletwise.config import LLMSettings, get_settings
from walletwise.exceptions import ErrorCode, LLMError
from walletwise.llm.models import GenerationResult, Message
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_llm_request

logger = get_logger(__name__)


class LLMClient(ABC):
    """Abstract base class for chat LLM clients."""

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate the next assistant message.

        Args:
            messages: Conversation messages, system message first.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens override.

        Returns:
            GenerationResult with generated text.

        Raises:
            LLMError: If generation fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None


class OpenAICompatibleClient(LLMClient):
    """Chat client for OpenAI-compatible completions APIs such as Groq."""

    def __init__(
        self,
        settings: LLMSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: LLM configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().llm
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = self._settings.api_key.get_secret_value()
        if api_key and api_key != "not-required":
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text using the chat completions API."""
        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/chat/completions"

        payload = {
            "model": self._settings.model,
            "messages": [
                {"role": msg.role.value, "content": msg.content} for msg in messages
            ],
            "temperature": self._settings.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self._settings.max_tokens,
        }

        start = time.perf_counter()

        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()

        except httpx.TimeoutException as e:
            self._track_failure(start)
            logger.error(f"LLM request timed out: {e}")
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            self._track_failure(start)
            status = e.response.status_code
            logger.error(f"LLM request failed: {status}")

            if status == 429:
                raise LLMError(
                    "Rate limit exceeded",
                    code=ErrorCode.LLM_RATE_LIMIT,
                    details={"status_code": status},
                ) from e

            raise LLMError(
                f"LLM service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"status_code": status},
            ) from e

        except httpx.RequestError as e:
            self._track_failure(start)
            logger.error(f"LLM connection error: {e}")
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
            usage = data.get("usage") or {}
        except (KeyError, IndexError, TypeError, ValueError) as e:
            self._track_failure(start)
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        result = GenerationResult(
            content=content,
            model=data.get("model", self._settings.model),
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
        )

        track_llm_request(
            model=self.model_name,
            duration=time.perf_counter() - start,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
        )
        return result

    def _track_failure(self, start: float) -> None:
        track_llm_request(
            model=self.model_name,
            duration=time.perf_counter() - start,
            prompt_tokens=0,
            completion_tokens=0,
            success=False,
        )
