"""Observability module for metrics and monitoring."""

from walletwise.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    track_embedding_request,
    track_llm_request,
    track_payment_confirmation,
    track_payment_dispatch,
    track_search_request,
    track_store_operation,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "track_embedding_request",
    "track_llm_request",
    "track_payment_confirmation",
    "track_payment_dispatch",
    "track_search_request",
    "track_store_operation",
]
