"""Integration tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from httpx import AsyncClient

from walletwise import __version__
from walletwise.api.app import app, lifespan


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    async def test_health_returns_200(self, client: AsyncClient) -> None:
        """Health endpoint returns 200 OK."""
        response = await client.get("/health")
        assert response.status_code == 200

    async def test_health_returns_status(self, client: AsyncClient) -> None:
        """Health endpoint returns healthy status."""
        response = await client.get("/health")
        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_returns_version(self, client: AsyncClient) -> None:
        """Health endpoint returns application version."""
        response = await client.get("/health")
        data = response.json()
        assert data["version"] == __version__

    async def test_health_returns_timestamp(self, client: AsyncClient) -> None:
        """Health endpoint returns ISO timestamp."""
        response = await client.get("/health")
        data = response.json()
        assert "timestamp" in data
        # Verify ISO format (contains T separator)
        assert "T" in data["timestamp"]


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    async def test_readiness_returns_200(self, client: AsyncClient) -> None:
        """Readiness endpoint returns 200 OK."""
        response = await client.get("/health/ready")
        assert response.status_code == 200

    async def test_readiness_returns_status(self, client: AsyncClient) -> None:
        """Readiness endpoint returns ready status."""
        response = await client.get("/health/ready")
        data = response.json()
        assert data["status"] == "ready"

    async def test_readiness_returns_checks(self, client: AsyncClient) -> None:
        """Readiness endpoint returns component checks."""
        response = await client.get("/health/ready")
        data = response.json()
        assert "checks" in data
        assert data["checks"]["config"] == "ok"

    async def test_readiness_reports_each_collaborator(self, client: AsyncClient) -> None:
        """Store, embedding and LLM credentials are all reported."""
        response = await client.get("/health/ready")
        checks = response.json()["checks"]
        assert set(checks) == {"config", "store", "embedding", "llm"}
        assert checks["llm"] in ("ok", "unconfigured")

    async def test_readiness_returns_timestamp(self, client: AsyncClient) -> None:
        """Readiness endpoint returns timestamp."""
        response = await client.get("/health/ready")
        data = response.json()
        assert "timestamp" in data


class TestLivenessEndpoint:
    """Tests for /health/live endpoint."""

    async def test_liveness_returns_200(self, client: AsyncClient) -> None:
        """Liveness endpoint returns 200 OK."""
        response = await client.get("/health/live")
        assert response.status_code == 200

    async def test_liveness_returns_alive(self, client: AsyncClient) -> None:
        """Liveness endpoint returns alive status."""
        response = await client.get("/health/live")
        data = response.json()
        assert data["status"] == "alive"



class TestMetricsEndpoint:
    """Tests for /metrics endpoint."""

    async def test_metrics_returns_prometheus_text(self, client: AsyncClient) -> None:
        """Metrics endpoint serves the Prometheus exposition format."""
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "payment_dispatch_total" in response.text


class TestLifespan:
    """Tests for application startup and shutdown."""

    async def test_shutdown_closes_clients(self) -> None:
        """HTTP clients of hosted collaborators are closed on shutdown."""
        store, embedding, llm = AsyncMock(), AsyncMock(), AsyncMock()
        subscription = MagicMock()
        payments = MagicMock()
        payments.watch_deep_links.return_value = subscription

        with (
            patch("walletwise.api.app.get_payment_service", return_value=payments),
            patch("walletwise.api.app.get_transaction_store", return_value=store),
            patch("walletwise.api.app.get_embedding_service", return_value=embedding),
            patch("walletwise.api.app.get_llm_client", return_value=llm),
        ):
            async with lifespan(app):
                store.close.assert_not_awaited()

        subscription.__exit__.assert_called_once()
        store.close.assert_awaited_once()
        embedding.close.assert_awaited_once()
        llm.close.assert_awaited_once()
