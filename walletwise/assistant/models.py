"""Assistant data models."""

from pydantic import BaseModel, Field

from walletwise.transactions.models import CategoryTotal, MonthlyTotal, Transaction


class TransactionSnapshot(BaseModel):
    """Spending data handed to the model as context.

    Attributes:
        transactions: Recent transactions, newest first.
        categories: Spend per category, largest first.
        monthly_spending: Spend per month, oldest first.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[CategoryTotal] = Field(default_factory=list)
    monthly_spending: list[MonthlyTotal] = Field(default_factory=list)
