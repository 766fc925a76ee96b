"""LLM client module."""

from walletwise.llm.client import LLMClient, OpenAICompatibleClient
from walletwise.llm.models import GenerationResult, Message, Role
from walletwise.llm.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    AssistantPromptTemplate,
)

__all__ = [
    "ANALYSIS_SYSTEM_PROMPT",
    "AssistantPromptTemplate",
    "GenerationResult",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
    "Role",
]
