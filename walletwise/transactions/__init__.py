"""Transaction persistence and spending summaries."""

from walletwise.transactions.models import (
    CategoryTotal,
    EmbeddedTransaction,
    MonthlyTotal,
    NewTransaction,
    Transaction,
)
from walletwise.transactions.store import SupabaseTransactionStore, TransactionStore
from walletwise.transactions.summary import totals_by_category, totals_by_month

__all__ = [
    "CategoryTotal",
    "EmbeddedTransaction",
    "MonthlyTotal",
    "NewTransaction",
    "SupabaseTransactionStore",
    "Transaction",
    "TransactionStore",
    "totals_by_category",
    "totals_by_month",
]
