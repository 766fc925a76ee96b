"""Search data models."""

from pydantic import Field

from walletwise.transactions.models import EmbeddedTransaction


class ScoredTransaction(EmbeddedTransaction):
    """A search hit: a transaction and its similarity to the query.

    Attributes:
        similarity: Cosine similarity to the query embedding.
    """

    similarity: float = Field(description="Cosine similarity to the query")
