"""Prometheus metrics for WalletWise.

Provides metrics instrumentation for:
- HTTP request latency and counts
- LLM token usage and latency
- Embedding request latency
- Local search results and scores
- UPI dispatch and payment confirmation outcomes
- Transaction store operations
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from walletwise.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

# Search Metrics
SEARCH_RESULTS_RETURNED = Histogram(
    "search_results_returned",
    "Number of transactions returned per local search",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

SEARCH_TOP_SCORE = Histogram(
    "search_top_score",
    "Top similarity score per local search",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Payment Metrics
PAYMENT_DISPATCH_TOTAL = Counter(
    "payment_dispatch_total",
    "UPI payment handoffs by outcome",
    ["outcome"],  # opened, activity, failed, error
)

PAYMENT_CONFIRMATION_TOTAL = Counter(
    "payment_confirmation_total",
    "User payment confirmations by result",
    ["result"],  # confirmed, cancelled
)

# Store Metrics
STORE_OPERATION_DURATION = Histogram(
    "store_operation_duration_seconds",
    "Transaction store operation duration",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        # Payment ids would otherwise explode the label space
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                return f"/api/v1/{parts[3]}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track LLM request metrics.

    Args:
        model: LLM model name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_embedding_request(
    model: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()


def track_search_request(results_returned: int, top_score: float) -> None:
    """Track local search metrics."""
    SEARCH_RESULTS_RETURNED.observe(results_returned)
    if top_score > 0:
        SEARCH_TOP_SCORE.observe(top_score)


def track_payment_dispatch(outcome: str) -> None:
    """Count a UPI handoff attempt by outcome."""
    PAYMENT_DISPATCH_TOTAL.labels(outcome=outcome).inc()


def track_payment_confirmation(confirmed: bool) -> None:
    """Count a user's yes/no payment confirmation."""
    PAYMENT_CONFIRMATION_TOTAL.labels(
        result="confirmed" if confirmed else "cancelled"
    ).inc()


def track_store_operation(operation: str, duration: float, success: bool = True) -> None:
    """Track transaction store operation latency."""
    status = "success" if success else "error"
    STORE_OPERATION_DURATION.labels(operation=operation, status=status).observe(duration)
