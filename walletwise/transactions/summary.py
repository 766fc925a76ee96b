"""Client-side spending aggregations over transaction rows."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from walletwise.transactions.models import CategoryTotal, MonthlyTotal

DEFAULT_CATEGORY = "Food"


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def totals_by_category(
    rows: Iterable[dict[str, Any]],
    default_category: str = DEFAULT_CATEGORY,
) -> list[CategoryTotal]:
    """Sum amounts per category, largest first.

    Rows without a category count toward `default_category`.
    """
    totals: dict[str, float] = defaultdict(float)
    for row in rows:
        category = row.get("category") or default_category
        totals[category] += float(row["amount"])

    return sorted(
        (CategoryTotal(name=name, amount=amount) for name, amount in totals.items()),
        key=lambda total: total.amount,
        reverse=True,
    )


def totals_by_month(rows: Iterable[dict[str, Any]]) -> list[MonthlyTotal]:
    """Sum amounts per calendar month, oldest first."""
    totals: dict[str, float] = defaultdict(float)
    for row in rows:
        date = _to_datetime(row["transaction_date"])
        totals[f"{date.year}-{date.month:02d}"] += float(row["amount"])

    return [
        MonthlyTotal(month=month, amount=amount)
        for month, amount in sorted(totals.items())
    ]
