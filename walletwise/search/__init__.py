"""Local semantic search over transactions."""

from walletwise.search.models import ScoredTransaction
from walletwise.search.searcher import LocalTransactionSearch
from walletwise.search.similarity import cosine_similarity

__all__ = [
    "LocalTransactionSearch",
    "ScoredTransaction",
    "cosine_similarity",
]
