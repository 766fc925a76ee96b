"""Chat message models."""

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Speaker of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One turn of a chat conversation."""

    role: Role = Field(description="Message role")
    content: str = Field(description="Message content")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)


class GenerationResult(BaseModel):
    """Assistant reply plus token accounting.

    Attributes:
        content: The generated text.
        model: Model that produced it.
        prompt_tokens: Tokens in the prompt.
        completion_tokens: Tokens in the reply.
        total_tokens: Sum of both.
    """

    content: str = Field(description="Generated text")
    model: str = Field(description="Model used")
    prompt_tokens: int = Field(default=0, description="Prompt token count")
    completion_tokens: int = Field(default=0, description="Completion token count")
    total_tokens: int = Field(default=0, description="Total token count")
