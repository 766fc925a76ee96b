"""Semantic search over transactions held in memory."""

from collections.abc import Sequence

from walletwise.config import SearchSettings, get_settings
from walletwise.embeddings.service import EmbeddingService
from walletwise.exceptions import EmbeddingError, ErrorCode
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_search_request
from walletwise.search.models import ScoredTransaction
from walletwise.search.similarity import cosine_similarity
from walletwise.transactions.models import EmbeddedTransaction

logger = get_logger(__name__)


class LocalTransactionSearch:
    """Ranks transactions by cosine similarity to a free-text query.

    Only the query is embedded remotely; transaction vectors must already
    be attached to the records. Search never raises: any failure after the
    empty-input check degrades to an empty result.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        settings: SearchSettings | None = None,
    ) -> None:
        """Initialize the searcher.

        Args:
            embedding_service: Service used to embed queries.
            settings: Default threshold and limit.
        """
        self._embedding_service = embedding_service
        self._settings = settings or get_settings().search

    async def generate_embedding(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: If the embedding call fails for any reason.
        """
        try:
            result = await self._embedding_service.embed(text)
        except EmbeddingError as e:
            logger.error(f"Embedding generation failed: {e.message}")
            raise EmbeddingError(
                "Failed to generate embedding",
                code=e.code,
                details=e.details,
            ) from e
        except Exception as e:
            logger.error(f"Embedding generation failed: {e}")
            raise EmbeddingError(
                "Failed to generate embedding",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e
        return result.embedding

    async def search_transactions_locally(
        self,
        query: str,
        transactions: Sequence[EmbeddedTransaction],
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[ScoredTransaction]:
        """Find the transactions most similar to a query.

        Args:
            query: Free-text search query.
            transactions: Candidates; those without an embedding are skipped.
            threshold: Minimum similarity (inclusive). Defaults to settings.
            limit: Maximum number of results. Defaults to settings.

        Returns:
            Matches ordered by descending similarity, ties in input order.
            Empty on any failure.
        """
        if not transactions:
            return []

        threshold = self._settings.threshold if threshold is None else threshold
        limit = self._settings.limit if limit is None else limit

        try:
            query_embedding = await self.generate_embedding(query)

            scored = [
                ScoredTransaction.model_validate(
                    {
                        **tx.model_dump(),
                        "similarity": cosine_similarity(query_embedding, tx.embedding),
                    }
                )
                for tx in transactions
                if tx.embedding is not None
            ]

            matches = [s for s in scored if s.similarity >= threshold]
            matches.sort(key=lambda s: s.similarity, reverse=True)
            results = matches[:limit]

        except Exception:
            logger.exception(
                "Error searching transactions locally",
                extra={"query_length": len(query), "candidates": len(transactions)},
            )
            return []

        track_search_request(
            results_returned=len(results),
            top_score=results[0].similarity if results else 0.0,
        )
        logger.debug(
            f"Local search returned {len(results)} results",
            extra={"candidates": len(transactions), "threshold": threshold},
        )
        return results
