"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from walletwise.api.app import app
from walletwise.embeddings.models import EmbeddingResult
from walletwise.embeddings.service import EmbeddingService
from walletwise.transactions.models import EmbeddedTransaction
from walletwise.transactions.store import TransactionStore
from walletwise.upi.launcher import UrlLauncher


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def clear_dependency_overrides() -> Iterator[None]:
    """Reset API dependency overrides after each test."""
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_store() -> AsyncMock:
    """Transaction store with no rows."""
    store = AsyncMock(spec=TransactionStore)
    store.get_transactions.return_value = []
    store.get_transactions_by_category.return_value = []
    store.get_monthly_spending.return_value = []
    return store


@pytest.fixture
def mock_embedding_service() -> AsyncMock:
    """Embedding service returning a fixed query vector."""
    service = AsyncMock(spec=EmbeddingService)
    service.embed.return_value = EmbeddingResult(
        text="coffee",
        embedding=[1.0, 0.0, 0.0],
        model="test-model",
        dimensions=3,
    )
    return service


@pytest.fixture
def launcher() -> AsyncMock:
    """Launcher without a pre-open check that accepts every URL."""
    mock = AsyncMock(spec=UrlLauncher)
    mock.supports_precheck = False
    mock.open.return_value = None
    return mock


@pytest.fixture
def sample_transactions() -> list[EmbeddedTransaction]:
    """Three transactions with small hand-made vectors."""
    return [
        EmbeddedTransaction(
            id=1,
            amount=250.0,
            payee="Cafe Coffee Day",
            upi_id="ccd@okaxis",
            notes="coffee",
            category="Food",
            transaction_date=datetime(2024, 1, 15, tzinfo=UTC),
            embedding=[1.0, 0.0, 0.0],
        ),
        EmbeddedTransaction(
            id=2,
            amount=1200.0,
            payee="Uber",
            upi_id="uber@icici",
            notes="ride",
            category="Travel",
            transaction_date=datetime(2024, 1, 20, tzinfo=UTC),
            embedding=[0.0, 1.0, 0.0],
        ),
        EmbeddedTransaction(
            id=3,
            amount=90.0,
            payee="Chai Point",
            upi_id="chai@ybl",
            notes="tea",
            category="Food",
            transaction_date=datetime(2024, 2, 2, tzinfo=UTC),
            embedding=[0.8, 0.6, 0.0],
        ),
    ]
