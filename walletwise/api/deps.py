"""Service providers for API dependency injection.

Each provider builds its service once from settings. Tests replace them
through `app.dependency_overrides`.
"""

from functools import lru_cache

from walletwise.assistant.service import FinanceAssistant
from walletwise.config import get_settings
from walletwise.embeddings.service import EmbeddingService, HuggingFaceEmbeddingService
from walletwise.llm.client import LLMClient, OpenAICompatibleClient
from walletwise.payments.service import PaymentService
from walletwise.search.searcher import LocalTransactionSearch
from walletwise.transactions.store import SupabaseTransactionStore, TransactionStore
from walletwise.upi.deeplink import DeepLinkHub
from walletwise.upi.launcher import build_launcher


@lru_cache
def get_deep_link_hub() -> DeepLinkHub:
    return DeepLinkHub()


@lru_cache
def get_transaction_store() -> TransactionStore:
    return SupabaseTransactionStore(settings=get_settings().store)


@lru_cache
def get_embedding_service() -> EmbeddingService:
    return HuggingFaceEmbeddingService(settings=get_settings().embedding)


@lru_cache
def get_llm_client() -> LLMClient:
    return OpenAICompatibleClient(settings=get_settings().llm)


@lru_cache
def get_payment_service() -> PaymentService:
    return PaymentService(
        launcher=build_launcher(get_settings().upi),
        store=get_transaction_store(),
        hub=get_deep_link_hub(),
    )


@lru_cache
def get_search() -> LocalTransactionSearch:
    return LocalTransactionSearch(
        embedding_service=get_embedding_service(),
        settings=get_settings().search,
    )


@lru_cache
def get_assistant() -> FinanceAssistant:
    return FinanceAssistant(
        llm_client=get_llm_client(),
        store=get_transaction_store(),
        settings=get_settings().llm,
    )
