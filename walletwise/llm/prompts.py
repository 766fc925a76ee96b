"""Prompt templates for the finance assistant."""

import json
from typing import Any

from walletwise.llm.models import Message

ANALYSIS_SYSTEM_PROMPT = "Analyze the following transaction data and provide insights."


class AssistantPromptTemplate:
    """System prompt carrying the user's transaction data.

    The data is dumped as JSON in full; nothing is truncated to fit a
    token budget.
    """

    DEFAULT_SYSTEM_PROMPT = (
        "You are a financial AI assistant helping users analyze their spending "
        "patterns and provide financial advice. Use Only Indian Rupees as currency.\n"
        "Current transaction data: {transaction_data}"
    )

    def __init__(self, system_prompt: str | None = None) -> None:
        """Initialize the template.

        Args:
            system_prompt: Custom template with a `{transaction_data}` slot.
        """
        self.system_prompt = system_prompt or self.DEFAULT_SYSTEM_PROMPT

    def format(self, **kwargs: Any) -> str:
        """Format the system prompt.

        Args:
            **kwargs: Must include 'transaction_data'.
        """
        return self.system_prompt.format(
            transaction_data=self.dump_data(kwargs["transaction_data"])
        )

    @staticmethod
    def dump_data(transaction_data: Any) -> str:
        """Serialize transaction data the way it is sent to the model."""
        return json.dumps(transaction_data, default=str, ensure_ascii=False)

    def build_system_message(self, transaction_data: Any) -> Message:
        """Build the leading system message."""
        return Message.system(self.format(transaction_data=transaction_data))

    def build_messages(
        self,
        history: list[Message],
        transaction_data: Any,
    ) -> list[Message]:
        """Prefix a conversation with the system message."""
        return [self.build_system_message(transaction_data), *history]
