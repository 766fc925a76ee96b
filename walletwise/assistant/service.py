"""Chat assistant over the user's spending data."""

from typing import Any

from walletwise.assistant.models import TransactionSnapshot
from walletwise.config import LLMSettings, get_settings
from walletwise.exceptions import LLMError, StoreError
from walletwise.llm.client import LLMClient
from walletwise.llm.models import Message, Role
from walletwise.llm.prompts import ANALYSIS_SYSTEM_PROMPT, AssistantPromptTemplate
from walletwise.logging_config import get_logger
from walletwise.transactions.models import Transaction
from walletwise.transactions.store import TransactionStore

logger = get_logger(__name__)

GREETING = (
    "Hello! I'm your WalletWise AI assistant. "
    "How can I help you with your finances today?"
)
ERROR_REPLY = "Sorry, I encountered an error. Please try again later."

SUGGESTIONS = [
    "What are my top spending categories?",
    "How much did I spend last month?",
    "Where can I save money?",
    "Give me financial advice based on my spending",
    "Show me my spending trends",
]


class FinanceAssistant:
    """Answers spending questions by forwarding them to a hosted LLM."""

    def __init__(
        self,
        llm_client: LLMClient,
        store: TransactionStore,
        prompt_template: AssistantPromptTemplate | None = None,
        settings: LLMSettings | None = None,
    ) -> None:
        """Initialize the assistant.

        Args:
            llm_client: Chat completions client.
            store: Source of transaction data.
            prompt_template: System prompt template.
            settings: LLM configuration, for the analysis token budget.
        """
        self._llm_client = llm_client
        self._store = store
        self._prompt_template = prompt_template or AssistantPromptTemplate()
        self._settings = settings or get_settings().llm

    async def load_transaction_data(self) -> TransactionSnapshot | None:
        """Gather transactions and summaries for the model.

        Returns:
            The snapshot, or None if the store could not be read.
        """
        try:
            transactions = await self._store.get_transactions()
            categories = await self._store.get_transactions_by_category()
            monthly = await self._store.get_monthly_spending()
        except StoreError as e:
            logger.error(f"Error loading transaction data: {e.message}")
            return None

        return TransactionSnapshot(
            transactions=[Transaction.model_validate(tx.model_dump()) for tx in transactions],
            categories=categories,
            monthly_spending=monthly,
        )

    async def get_ai_response(
        self,
        messages: list[Message],
        transaction_data: TransactionSnapshot | dict[str, Any] | None,
    ) -> str:
        """Get the assistant's reply to a conversation.

        Args:
            messages: User and assistant turns, oldest first.
            transaction_data: Spending context for the system message.

        Raises:
            LLMError: If the model call fails.
        """
        if isinstance(transaction_data, TransactionSnapshot):
            transaction_data = transaction_data.model_dump(mode="json")

        prompt = self._prompt_template.build_messages(messages, transaction_data)
        result = await self._llm_client.generate(prompt)
        return result.content

    async def analyze_transactions(self, transactions: list[Transaction]) -> str:
        """One-shot insight report over a list of transactions.

        Raises:
            LLMError: If the model call fails.
        """
        payload = [
            Transaction.model_validate(tx.model_dump()).model_dump(mode="json")
            for tx in transactions
        ]
        result = await self._llm_client.generate(
            [
                Message.system(ANALYSIS_SYSTEM_PROMPT),
                Message.user(AssistantPromptTemplate.dump_data(payload)),
            ],
            max_tokens=self._settings.analysis_max_tokens,
        )
        return result.content


class ChatSession:
    """One conversation with the assistant.

    Model failures never escape `send`; they become an apology turn so the
    conversation can continue.
    """

    def __init__(
        self,
        assistant: FinanceAssistant,
        transaction_data: TransactionSnapshot | None = None,
    ) -> None:
        self._assistant = assistant
        self.transaction_data = transaction_data
        self._messages: list[Message] = [Message.assistant(GREETING)]

    @property
    def messages(self) -> list[Message]:
        """Conversation so far, greeting first."""
        return list(self._messages)

    async def refresh(self) -> None:
        """Reload the spending context from the store."""
        self.transaction_data = await self._assistant.load_transaction_data()

    async def send(self, text: str) -> Message | None:
        """Send a user message and record the reply.

        Returns:
            The assistant turn, or None if the text was blank.
        """
        if not text.strip():
            return None

        history = [
            m for m in self._messages if m.role in (Role.USER, Role.ASSISTANT)
        ]
        user_message = Message.user(text)
        self._messages.append(user_message)

        try:
            content = await self._assistant.get_ai_response(
                [*history, user_message],
                self.transaction_data,
            )
        except LLMError as e:
            logger.error(f"Error getting AI response: {e.message}")
            content = ERROR_REPLY

        reply = Message.assistant(content)
        self._messages.append(reply)
        return reply
