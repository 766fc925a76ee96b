"""Payment flow orchestration."""

from walletwise.payments.models import PaymentStatus, PendingPayment
from walletwise.payments.service import NO_UPI_APP_MESSAGE, PaymentService

__all__ = [
    "NO_UPI_APP_MESSAGE",
    "PaymentService",
    "PaymentStatus",
    "PendingPayment",
]
