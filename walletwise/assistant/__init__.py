"""Spending assistant built on the hosted LLM."""

from walletwise.assistant.models import TransactionSnapshot
from walletwise.assistant.service import (
    ERROR_REPLY,
    GREETING,
    SUGGESTIONS,
    ChatSession,
    FinanceAssistant,
)

__all__ = [
    "ERROR_REPLY",
    "GREETING",
    "SUGGESTIONS",
    "ChatSession",
    "FinanceAssistant",
    "TransactionSnapshot",
]
