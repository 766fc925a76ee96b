"""FastAPI application entry point.

Configures the application with logging, metrics, exception handling, and
health checks.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from walletwise import __version__
from walletwise.api.deps import (
    get_embedding_service,
    get_llm_client,
    get_payment_service,
    get_transaction_store,
)
from walletwise.api.routes import router
from walletwise.config import get_settings
from walletwise.exceptions import ErrorCode, WalletWiseError
from walletwise.logging_config import get_logger, setup_logging
from walletwise.observability import MetricsMiddleware, get_metrics, get_metrics_content_type

logger = get_logger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MISSING_TRANSACTION_FIELDS: 400,
    ErrorCode.EMBEDDING_DIMENSION_MISMATCH: 400,
    ErrorCode.PAYMENT_NOT_FOUND: 404,
    ErrorCode.UPI_PARSE_ERROR: 422,
    ErrorCode.LLM_RATE_LIMIT: 429,
    ErrorCode.EMBEDDING_SERVICE_ERROR: 502,
    ErrorCode.STORE_ERROR: 502,
    ErrorCode.LLM_SERVICE_ERROR: 502,
    ErrorCode.UPI_DISPATCH_ERROR: 503,
    ErrorCode.UPI_NO_HANDLER: 503,
    ErrorCode.LLM_TIMEOUT: 504,
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Subscribes the payment flow to inbound deep links for the lifetime of
    the process, and closes the hosted collaborators' HTTP clients on
    shutdown.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting WalletWise",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    with get_payment_service().watch_deep_links():
        yield

    logger.info("Shutting down WalletWise")
    await get_transaction_store().close()
    await get_embedding_service().close()
    await get_llm_client().close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="WalletWise",
        description="UPI payments, spending history and a finance assistant",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(WalletWiseError, walletwise_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics, methods=["GET"], tags=["Observability"])
    app.include_router(router)

    return app


async def walletwise_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert WalletWiseError exceptions to structured JSON responses."""
    if not isinstance(exc, WalletWiseError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": str(exc), "details": {}}
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=_get_status_code(exc.code),
        content=exc.to_dict(),
    )


def _get_status_code(error_code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    return _STATUS_BY_CODE.get(error_code, 500)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check() -> dict[str, Any]:
    """Readiness probe.

    Reports which hosted collaborators have credentials configured. A
    missing key does not make the service unready; the affected routes
    fail on their own.
    """
    settings = get_settings()
    checks: dict[str, str] = {
        "config": "ok",
        "store": "ok" if settings.store.api_key.get_secret_value() else "unconfigured",
        "embedding": "ok" if settings.embedding.api_key.get_secret_value() else "unconfigured",
        "llm": "ok" if settings.llm.api_key.get_secret_value() else "unconfigured",
    }

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}


async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


app = create_app()
