"""Tests for LLM module."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import SecretStr

from walletwise.config import LLMSettings
from walletwise.exceptions import ErrorCode, LLMError
from walletwise.llm.client import OpenAICompatibleClient
from walletwise.llm.models import GenerationResult, Message, Role
from walletwise.llm.prompts import AssistantPromptTemplate


def _completion(content: str = "Generated response") -> MagicMock:
    mock_response = MagicMock()
    mock_response.json.return_value = {
        "choices": [{"message": {"content": content}}],
        "model": "test-model",
        "usage": {
            "prompt_tokens": 10,
            "completion_tokens": 20,
            "total_tokens": 30,
        },
    }
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestMessage:
    """Tests for Message model."""

    def test_create_message(self) -> None:
        """Message can be created."""
        msg = Message(role=Role.USER, content="Hello")
        assert msg.role == Role.USER
        assert msg.content == "Hello"

    def test_constructors(self) -> None:
        """Role shortcuts build the right role."""
        assert Message.system("s").role == Role.SYSTEM
        assert Message.user("u").role == Role.USER
        assert Message.assistant("a").role == Role.ASSISTANT


class TestGenerationResult:
    """Tests for GenerationResult model."""

    def test_token_defaults(self) -> None:
        """Token counts default to zero."""
        result = GenerationResult(content="Generated text", model="test-model")
        assert result.total_tokens == 0


class TestOpenAICompatibleClient:
    """Tests for OpenAICompatibleClient."""

    def test_model_name(self) -> None:
        """Client returns configured model name."""
        client = OpenAICompatibleClient(settings=LLMSettings(model="llama3-70b-8192"))
        assert client.model_name == "llama3-70b-8192"

    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        """Client posts the conversation and reads the first choice."""
        settings = LLMSettings(
            base_url="http://test/openai/v1",
            model="test-model",
            api_key=SecretStr("gsk_test"),
        )
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _completion()

        client = OpenAICompatibleClient(settings=settings, client=mock_client)
        result = await client.generate([Message.system("ctx"), Message.user("Hello")])

        assert result.content == "Generated response"
        assert result.total_tokens == 30

        call = mock_client.post.call_args
        assert call.args[0] == "http://test/openai/v1/chat/completions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer gsk_test"
        payload = call.kwargs["json"]
        assert payload["model"] == "test-model"
        assert payload["messages"] == [
            {"role": "system", "content": "ctx"},
            {"role": "user", "content": "Hello"},
        ]
        assert payload["max_tokens"] == 1024

    @pytest.mark.asyncio
    async def test_overrides(self) -> None:
        """Zero temperature and a token budget override the defaults."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _completion()

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)
        await client.generate([Message.user("Hi")], temperature=0.0, max_tokens=4096)

        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["temperature"] == 0.0
        assert payload["max_tokens"] == 4096

    @pytest.mark.asyncio
    async def test_placeholder_key_sends_no_auth(self) -> None:
        """The default placeholder key is not sent."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _completion()

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)
        await client.generate([Message.user("Hi")])

        assert "Authorization" not in mock_client.post.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_timeout_error(self) -> None:
        """Timeout raises LLMError with correct code."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.TimeoutException("Timeout")

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.generate([Message.user("Hello")])

        assert exc_info.value.code == ErrorCode.LLM_TIMEOUT

    @pytest.mark.asyncio
    async def test_rate_limit_error(self) -> None:
        """Rate limit returns correct error code."""
        mock_response = MagicMock()
        mock_response.status_code = 429
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Rate limit",
            request=MagicMock(),
            response=mock_response,
        )
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = mock_response

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.generate([Message.user("Hello")])

        assert exc_info.value.code == ErrorCode.LLM_RATE_LIMIT

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Connection error raises LLMError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.RequestError("Connection failed")

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.generate([Message.user("Hello")])

        assert exc_info.value.code == ErrorCode.LLM_SERVICE_ERROR

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        """A body without choices raises LLMError."""
        mock_response = MagicMock()
        mock_response.json.return_value = {"choices": []}
        mock_response.raise_for_status = MagicMock()
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = mock_response

        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)

        with pytest.raises(LLMError, match="Invalid response"):
            await client.generate([Message.user("Hello")])

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Client closes properly."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        client = OpenAICompatibleClient(settings=LLMSettings(), client=mock_client)
        client._owns_client = True

        await client.close()

        mock_client.aclose.assert_called_once()


class TestAssistantPromptTemplate:
    """Tests for AssistantPromptTemplate."""

    def test_default_prompt(self) -> None:
        """Default prompt pins the currency and carries a data slot."""
        template = AssistantPromptTemplate()
        assert "Indian Rupees" in template.system_prompt
        assert "{transaction_data}" in template.system_prompt

    def test_format_embeds_full_json(self) -> None:
        """Transaction data is dumped as JSON without truncation."""
        data = {"transactions": [{"payee": f"Shop {i}", "amount": i} for i in range(200)]}
        prompt = AssistantPromptTemplate().format(transaction_data=data)

        dumped = prompt.split("Current transaction data: ", 1)[1]
        assert json.loads(dumped) == data

    def test_custom_prompt(self) -> None:
        """Template accepts a custom prompt."""
        template = AssistantPromptTemplate(system_prompt="Data: {transaction_data}")
        assert template.format(transaction_data=None) == "Data: null"

    def test_build_messages(self) -> None:
        """System message comes first, history follows in order."""
        history = [Message.user("Hi"), Message.assistant("Hello"), Message.user("Spend?")]
        messages = AssistantPromptTemplate().build_messages(history, {"categories": []})

        assert messages[0].role == Role.SYSTEM
        assert messages[1:] == history
