"""UPI data models."""

import math
import re
from typing import Literal

from pydantic import BaseModel, Field

# local-part@handle, ASCII only; use fullmatch
VPA_PATTERN = re.compile(r"[\w.\-]+@[\w\-]+", re.ASCII)

# Digits with an optional fractional part, nothing else
AMOUNT_PATTERN = re.compile(r"\d+(?:\.\d+)?", re.ASCII)

INVALID_ADDRESS_MESSAGE = "Please enter a valid UPI ID (e.g., name@upi)"
INVALID_AMOUNT_MESSAGE = "Please enter a valid amount"


def is_positive_amount(amount: str) -> bool:
    """Check that a plain decimal string is a positive finite number."""
    if not isinstance(amount, str) or AMOUNT_PATTERN.fullmatch(amount) is None:
        return False
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


class UpiPaymentRequest(BaseModel):
    """A payment intent to be dispatched to a UPI-capable app.

    Instances may hold unvalidated form input. Use `validation_errors()`
    or `is_valid_for_dispatch()` before handing one to the dispatcher.

    Attributes:
        payee_address: Recipient VPA (name@handle).
        payee_name: Display label for the recipient.
        amount: Decimal string amount in rupees.
        currency: Always "INR".
        notes: Optional transaction note.
    """

    payee_address: str = Field(description="Recipient virtual payment address")
    payee_name: str = Field(default="", description="Recipient display name")
    amount: str = Field(description="Amount as a plain decimal string")
    currency: Literal["INR"] = Field(default="INR", description="Currency code")
    notes: str = Field(default="", description="Transaction note")

    def validation_errors(self) -> dict[str, str]:
        """Return a field -> message map of dispatch blockers."""
        errors: dict[str, str] = {}
        if VPA_PATTERN.fullmatch(self.payee_address) is None:
            errors["payee_address"] = INVALID_ADDRESS_MESSAGE
        if not is_positive_amount(self.amount):
            errors["amount"] = INVALID_AMOUNT_MESSAGE
        return errors

    def is_valid_for_dispatch(self) -> bool:
        """Whether the request may be handed to a UPI app."""
        return not self.validation_errors()


class ParsedUpiQr(BaseModel):
    """Fields decoded from a scanned UPI QR payload.

    Attributes:
        upi_id: Value of the `pa` parameter.
        payee: Value of the `pn` parameter.
        amount: Value of the `am` parameter.
        notes: Value of the `tn` parameter.
        currency: Value of the `cu` parameter.
    """

    upi_id: str = Field(default="", description="Payee address (pa)")
    payee: str = Field(default="", description="Payee name (pn)")
    amount: str = Field(default="", description="Amount (am)")
    notes: str = Field(default="", description="Transaction note (tn)")
    currency: str = Field(default="INR", description="Currency (cu)")

    def to_payment_request(self) -> UpiPaymentRequest:
        """Pre-populate a payment request for user confirmation."""
        return UpiPaymentRequest(
            payee_address=self.upi_id,
            payee_name=self.payee,
            amount=self.amount,
            notes=self.notes,
        )
