"""Transaction data models."""

import json
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class Transaction(BaseModel):
    """A recorded payment as stored in the transactions table.

    Attributes:
        id: Row identifier assigned by the store.
        amount: Amount paid in rupees.
        payee: Recipient display name.
        upi_id: Recipient VPA.
        notes: Free-text note.
        category: Spending category.
        transaction_date: When the payment was recorded.
    """

    id: int | str | None = Field(default=None, description="Row identifier")
    amount: float = Field(description="Amount in INR")
    payee: str = Field(description="Recipient name")
    upi_id: str = Field(description="Recipient VPA")
    notes: str | None = Field(default="", description="Transaction note")
    category: str | None = Field(default=None, description="Spending category")
    transaction_date: datetime | None = Field(default=None, description="Record time")


class NewTransaction(BaseModel):
    """Input for saving a confirmed payment.

    Amount is kept as entered; the store converts it to a number.
    """

    upi_id: str = Field(default="", description="Recipient VPA")
    payee: str = Field(default="", description="Recipient name")
    amount: str | float = Field(default="", description="Amount as entered")
    notes: str = Field(default="", description="Transaction note")
    category: str | None = Field(default=None, description="Spending category")


class CategoryTotal(BaseModel):
    """Total spend for one category."""

    name: str = Field(description="Category name")
    amount: float = Field(description="Total amount in INR")


class MonthlyTotal(BaseModel):
    """Total spend for one calendar month."""

    month: str = Field(description="Month as YYYY-MM")
    amount: float = Field(description="Total amount in INR")


class EmbeddedTransaction(Transaction):
    """A transaction carrying a precomputed embedding vector.

    All vectors compared against each other must share one length.
    """

    embedding: list[float] | None = Field(
        default=None,
        description="Embedding of the transaction text",
    )

    @field_validator("embedding", mode="before")
    @classmethod
    def _parse_vector_text(cls, value: object) -> object:
        # pgvector columns come back over REST as "[0.1,0.2,...]"
        if isinstance(value, str):
            return json.loads(value)
        return value
