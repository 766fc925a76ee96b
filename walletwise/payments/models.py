"""Payment flow models."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from walletwise.transactions.models import Transaction
from walletwise.upi.models import UpiPaymentRequest


class PaymentStatus(str, Enum):
    """Where a payment stands after handoff to the UPI app."""

    DISPATCHED = "dispatched"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


OPEN_STATUSES = frozenset({PaymentStatus.DISPATCHED, PaymentStatus.AWAITING_CONFIRMATION})


class PendingPayment(BaseModel):
    """A handed-off payment waiting for the user's yes/no confirmation.

    Attributes:
        id: Local identifier.
        request: The dispatched payment request.
        category: Spending category to record on confirmation.
        status: Current state.
        callback_url: Last deep link received from the payment app, if any.
        transaction: Stored record once confirmed.
        created_at: When the payment was handed off.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    request: UpiPaymentRequest
    category: str | None = None
    status: PaymentStatus = PaymentStatus.DISPATCHED
    callback_url: str | None = None
    transaction: Transaction | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_open(self) -> bool:
        """Whether the payment still awaits a decision."""
        return self.status in OPEN_STATUSES
