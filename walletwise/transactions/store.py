"""Transaction store interface and Supabase implementation."""

import time
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

import httpx

from walletwise.config import StoreSettings, get_settings
from walletwise.exceptions import ErrorCode, StoreError, ValidationError
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_store_operation
from walletwise.transactions.models import (
    CategoryTotal,
    EmbeddedTransaction,
    MonthlyTotal,
    NewTransaction,
    Transaction,
)
from walletwise.transactions.summary import totals_by_category, totals_by_month

logger = get_logger(__name__)


class TransactionStore(ABC):
    """Abstract base class for transaction persistence.

    Defines the reads and writes the payment and assistant flows need.
    """

    @abstractmethod
    async def save_transaction(self, transaction: NewTransaction) -> list[Transaction]:
        """Persist a confirmed payment.

        Args:
            transaction: Payment details as entered.

        Returns:
            The stored rows.

        Raises:
            ValidationError: If required fields are missing.
            StoreError: If the store rejects the write.
        """
        ...

    @abstractmethod
    async def get_transactions(self, limit: int = 50) -> list[EmbeddedTransaction]:
        """Fetch the most recent transactions, newest first.

        Args:
            limit: Maximum number of rows.

        Raises:
            StoreError: If the read fails.
        """
        ...

    @abstractmethod
    async def get_transactions_by_category(self) -> list[CategoryTotal]:
        """Total spend per category, largest first."""
        ...

    @abstractmethod
    async def get_monthly_spending(self) -> list[MonthlyTotal]:
        """Total spend per month, oldest first."""
        ...

    @abstractmethod
    async def get_category_spending_by_period(
        self,
        start_date: datetime | str,
        end_date: datetime | str,
    ) -> list[CategoryTotal]:
        """Total spend per category within an inclusive date range."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None


class SupabaseTransactionStore(TransactionStore):
    """Transaction store backed by Supabase's PostgREST API."""

    def __init__(
        self,
        settings: StoreSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Supabase store.

        Args:
            settings: Store configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().store
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def table_url(self) -> str:
        """REST endpoint of the transactions table."""
        return f"{self._settings.url.rstrip('/')}/rest/v1/{self._settings.table}"

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.api_key.get_secret_value()
        return {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        operation: str,
        method: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Send one PostgREST request and return the row list.

        Raises:
            StoreError: If the request fails or the body is not a row list.
        """
        client = await self._get_client()
        start = time.perf_counter()

        try:
            response = await client.request(
                method,
                self.table_url,
                params=params,
                json=json,
                headers={**self._headers(), **(headers or {})},
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            track_store_operation(operation, time.perf_counter() - start, success=False)
            logger.error(
                f"Store {operation} failed: {e.response.status_code}",
                extra={"operation": operation, "status": e.response.status_code},
            )
            raise StoreError(
                f"Transaction store returned {e.response.status_code}",
                details={"operation": operation, "status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_store_operation(operation, time.perf_counter() - start, success=False)
            logger.error(f"Store {operation} error: {e}", extra={"operation": operation})
            raise StoreError(
                f"Failed to connect to transaction store: {e}",
                details={"operation": operation},
            ) from e
        except ValueError as e:
            track_store_operation(operation, time.perf_counter() - start, success=False)
            raise StoreError(
                f"Invalid response from transaction store: {e}",
                details={"operation": operation},
            ) from e

        track_store_operation(operation, time.perf_counter() - start)

        if not isinstance(rows, list):
            raise StoreError(
                "Transaction store did not return a row list",
                details={"operation": operation},
            )
        return rows

    async def save_transaction(self, transaction: NewTransaction) -> list[Transaction]:
        """Persist a confirmed payment."""
        if not transaction.amount or not transaction.payee or not transaction.upi_id:
            raise ValidationError(
                "Missing required transaction fields",
                code=ErrorCode.MISSING_TRANSACTION_FIELDS,
                details={
                    "amount": bool(transaction.amount),
                    "payee": bool(transaction.payee),
                    "upi_id": bool(transaction.upi_id),
                },
            )

        try:
            amount = float(transaction.amount)
        except ValueError as e:
            raise ValidationError(
                "Transaction amount is not a number",
                details={"amount": str(transaction.amount)},
            ) from e

        row = {
            "amount": amount,
            "payee": transaction.payee,
            "upi_id": transaction.upi_id,
            "notes": transaction.notes or "",
            "category": transaction.category or self._settings.default_category,
            "transaction_date": datetime.now(UTC).isoformat(),
        }
        logger.debug("Saving transaction", extra={"row": row})

        rows = await self._request(
            "insert",
            "POST",
            json=[row],
            headers={"Prefer": "return=representation"},
        )

        logger.info(
            "Transaction saved",
            extra={"payee": row["payee"], "category": row["category"]},
        )
        return [Transaction.model_validate(r) for r in rows]

    async def get_transactions(self, limit: int = 50) -> list[EmbeddedTransaction]:
        """Fetch the most recent transactions, newest first."""
        rows = await self._request(
            "select",
            "GET",
            params=[
                ("select", "*"),
                ("order", "transaction_date.desc"),
                ("limit", str(limit)),
            ],
        )
        return [EmbeddedTransaction.model_validate(r) for r in rows]

    async def get_transactions_by_category(self) -> list[CategoryTotal]:
        """Total spend per category, largest first."""
        rows = await self._request(
            "by_category",
            "GET",
            params=[("select", "category,amount")],
        )
        return totals_by_category(rows, self._settings.default_category)

    async def get_monthly_spending(self) -> list[MonthlyTotal]:
        """Total spend per month, oldest first."""
        rows = await self._request(
            "monthly",
            "GET",
            params=[("select", "transaction_date,amount")],
        )
        return totals_by_month(rows)

    async def get_category_spending_by_period(
        self,
        start_date: datetime | str,
        end_date: datetime | str,
    ) -> list[CategoryTotal]:
        """Total spend per category within an inclusive date range."""
        start = start_date.isoformat() if isinstance(start_date, datetime) else start_date
        end = end_date.isoformat() if isinstance(end_date, datetime) else end_date

        rows = await self._request(
            "by_period",
            "GET",
            params=[
                ("select", "category,amount"),
                ("transaction_date", f"gte.{start}"),
                ("transaction_date", f"lte.{end}"),
            ],
        )
        return totals_by_category(rows, self._settings.default_category)
