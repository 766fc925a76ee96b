"""Embedding data models."""

from pydantic import BaseModel, Field, model_validator


class EmbeddingResult(BaseModel):
    """A text and the vector the embedding model produced for it.

    Attributes:
        text: The embedded text.
        embedding: The embedding vector.
        model: Model that produced the vector.
        dimensions: Vector length.
    """

    text: str = Field(description="Embedded text")
    embedding: list[float] = Field(description="Embedding vector")
    model: str = Field(description="Model used for embedding")
    dimensions: int = Field(description="Vector dimensions")

    @model_validator(mode="after")
    def _check_dimensions(self) -> "EmbeddingResult":
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )
        return self
