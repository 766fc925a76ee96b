"""Tests for the finance assistant."""

import json
from unittest.mock import AsyncMock

import pytest

from walletwise.assistant.models import TransactionSnapshot
from walletwise.assistant.service import ERROR_REPLY, GREETING, ChatSession, FinanceAssistant
from walletwise.config import LLMSettings
from walletwise.exceptions import ErrorCode, LLMError, StoreError
from walletwise.llm.client import LLMClient
from walletwise.llm.models import GenerationResult, Message, Role
from walletwise.llm.prompts import ANALYSIS_SYSTEM_PROMPT
from walletwise.transactions.models import CategoryTotal, EmbeddedTransaction, MonthlyTotal


@pytest.fixture
def llm_client() -> AsyncMock:
    client = AsyncMock(spec=LLMClient)
    client.generate.return_value = GenerationResult(content="You spent most on Food.", model="m")
    return client


@pytest.fixture
def assistant(llm_client: AsyncMock, mock_store: AsyncMock) -> FinanceAssistant:
    return FinanceAssistant(
        llm_client=llm_client,
        store=mock_store,
        settings=LLMSettings(analysis_max_tokens=4096),
    )


class TestLoadTransactionData:
    """Tests for gathering model context."""

    async def test_snapshot(
        self,
        assistant: FinanceAssistant,
        mock_store: AsyncMock,
        sample_transactions: list[EmbeddedTransaction],
    ) -> None:
        """Transactions and summaries are gathered without vectors."""
        mock_store.get_transactions.return_value = sample_transactions
        mock_store.get_transactions_by_category.return_value = [
            CategoryTotal(name="Travel", amount=1200.0)
        ]
        mock_store.get_monthly_spending.return_value = [MonthlyTotal(month="2024-01", amount=1450.0)]

        snapshot = await assistant.load_transaction_data()

        assert snapshot is not None
        assert len(snapshot.transactions) == 3
        assert "embedding" not in snapshot.model_dump()["transactions"][0]
        assert snapshot.categories[0].name == "Travel"

    async def test_store_failure(self, assistant: FinanceAssistant, mock_store: AsyncMock) -> None:
        """A store failure yields no context rather than an error."""
        mock_store.get_transactions.side_effect = StoreError("down")
        assert await assistant.load_transaction_data() is None


class TestGetAiResponse:
    """Tests for single replies."""

    async def test_system_message_carries_data(
        self,
        assistant: FinanceAssistant,
        llm_client: AsyncMock,
    ) -> None:
        """The conversation is prefixed with a system message holding the data."""
        snapshot = TransactionSnapshot(categories=[CategoryTotal(name="Food", amount=500.0)])
        history = [Message.user("Where does my money go?")]

        reply = await assistant.get_ai_response(history, snapshot)

        assert reply == "You spent most on Food."
        sent = llm_client.generate.call_args.args[0]
        assert sent[0].role == Role.SYSTEM
        assert '"name": "Food"' in sent[0].content
        assert sent[1:] == history

    async def test_llm_failure_propagates(
        self,
        assistant: FinanceAssistant,
        llm_client: AsyncMock,
    ) -> None:
        """Model errors reach the caller."""
        llm_client.generate.side_effect = LLMError("Rate limit exceeded", code=ErrorCode.LLM_RATE_LIMIT)

        with pytest.raises(LLMError):
            await assistant.get_ai_response([Message.user("Hi")], None)


class TestAnalyzeTransactions:
    """Tests for one-shot analysis."""

    async def test_analysis_prompt(
        self,
        assistant: FinanceAssistant,
        llm_client: AsyncMock,
        sample_transactions: list[EmbeddedTransaction],
    ) -> None:
        """Transactions are sent as JSON with the analysis budget."""
        await assistant.analyze_transactions(sample_transactions)

        messages = llm_client.generate.call_args.args[0]
        assert messages[0] == Message.system(ANALYSIS_SYSTEM_PROMPT)
        payload = json.loads(messages[1].content)
        assert [t["payee"] for t in payload] == ["Cafe Coffee Day", "Uber", "Chai Point"]
        assert "embedding" not in payload[0]
        assert llm_client.generate.call_args.kwargs["max_tokens"] == 4096


class TestChatSession:
    """Tests for a running conversation."""

    def test_starts_with_greeting(self, assistant: FinanceAssistant) -> None:
        """New sessions open with the greeting."""
        session = ChatSession(assistant)
        assert session.messages == [Message.assistant(GREETING)]

    async def test_send(self, assistant: FinanceAssistant, llm_client: AsyncMock) -> None:
        """User and assistant turns are appended in order."""
        session = ChatSession(assistant)

        reply = await session.send("How much on food?")

        assert reply == Message.assistant("You spent most on Food.")
        assert [m.role for m in session.messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
        sent = llm_client.generate.call_args.args[0]
        assert sent[-1] == Message.user("How much on food?")

    async def test_blank_message_ignored(
        self,
        assistant: FinanceAssistant,
        llm_client: AsyncMock,
    ) -> None:
        """Whitespace-only input sends nothing."""
        session = ChatSession(assistant)

        assert await session.send("   ") is None
        llm_client.generate.assert_not_called()
        assert len(session.messages) == 1

    async def test_llm_failure_becomes_apology(
        self,
        assistant: FinanceAssistant,
        llm_client: AsyncMock,
    ) -> None:
        """Model errors turn into the apology reply."""
        llm_client.generate.side_effect = LLMError("LLM request timed out")
        session = ChatSession(assistant)

        reply = await session.send("Hi")

        assert reply is not None
        assert reply.content == ERROR_REPLY
        assert session.messages[-1].content == ERROR_REPLY

    async def test_refresh(
        self,
        assistant: FinanceAssistant,
        mock_store: AsyncMock,
    ) -> None:
        """Refreshing reloads the context from the store."""
        session = ChatSession(assistant)
        mock_store.get_monthly_spending.return_value = [MonthlyTotal(month="2024-03", amount=10.0)]

        await session.refresh()

        assert session.transaction_data is not None
        assert session.transaction_data.monthly_spending[0].month == "2024-03"
