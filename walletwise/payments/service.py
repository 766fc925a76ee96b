"""Payment flow: dispatch, confirmation and recording."""

from collections import deque
from typing import Any

from walletwise.exceptions import ErrorCode, StoreError, UpiDispatchError, ValidationError
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_payment_confirmation
from walletwise.payments.models import PaymentStatus, PendingPayment
from walletwise.transactions.models import NewTransaction
from walletwise.transactions.store import TransactionStore
from walletwise.upi.deeplink import DeepLinkHub, DeepLinkSubscription, register_deep_link_listener
from walletwise.upi.dispatch import dispatch_payment
from walletwise.upi.launcher import UrlLauncher
from walletwise.upi.links import extract_payment_data
from walletwise.upi.models import UpiPaymentRequest

logger = get_logger(__name__)

NO_UPI_APP_MESSAGE = (
    "Failed to initiate payment. Please check if you have a UPI app installed."
)

# Decided payments kept for lookups before the oldest are dropped
MAX_DECIDED_PAYMENTS = 100


class PaymentService:
    """Tracks payments from handoff to the user's confirmation.

    A payment app gives no reliable signal of success. A payment is only
    recorded after the user confirms it; a deep link back from the app
    merely moves it to awaiting confirmation.
    """

    def __init__(
        self,
        launcher: UrlLauncher,
        store: TransactionStore,
        hub: DeepLinkHub | None = None,
        max_decided: int = MAX_DECIDED_PAYMENTS,
    ) -> None:
        """Initialize the payment service.

        Args:
            launcher: Platform URL launcher.
            store: Where confirmed payments are recorded.
            hub: Inbound deep-link channel.
            max_decided: How many confirmed or cancelled payments stay
                retrievable by id.
        """
        self._launcher = launcher
        self._store = store
        self._hub = hub or DeepLinkHub()
        self._payments: dict[str, PendingPayment] = {}
        self._decided: deque[str] = deque()
        self._max_decided = max_decided

    @property
    def hub(self) -> DeepLinkHub:
        """Inbound deep-link channel."""
        return self._hub

    def get(self, payment_id: str) -> PendingPayment:
        """Look up a payment by id.

        Raises:
            ValidationError: If the id is unknown.
        """
        payment = self._payments.get(payment_id)
        if payment is None:
            raise ValidationError(
                f"Unknown payment: {payment_id}",
                code=ErrorCode.PAYMENT_NOT_FOUND,
                details={"payment_id": payment_id},
            )
        return payment

    def open_payments(self) -> list[PendingPayment]:
        """Payments still waiting for a decision, oldest first."""
        return [p for p in self._payments.values() if p.is_open]

    async def initiate(
        self,
        request: UpiPaymentRequest,
        category: str | None = None,
    ) -> PendingPayment:
        """Validate and hand a payment to the UPI app.

        Raises:
            ValidationError: If the request is invalid.
            UpiDispatchError: If no UPI app accepted the handoff.
        """
        logger.info(
            "Initiating payment",
            extra={"payee_address": request.payee_address, "amount": request.amount},
        )

        if not await dispatch_payment(request, self._launcher):
            raise UpiDispatchError(
                NO_UPI_APP_MESSAGE,
                code=ErrorCode.UPI_NO_HANDLER,
                details={"payee_address": request.payee_address},
            )

        payment = PendingPayment(request=request, category=category)
        self._payments[payment.id] = payment
        return payment

    async def confirm(self, payment_id: str, succeeded: bool) -> PendingPayment:
        """Apply the user's answer to "did the payment go through?".

        On yes the payment is recorded in the store. If that write fails
        the payment stays open so the user can try again.

        Raises:
            ValidationError: If the payment is unknown or already decided.
            StoreError: If recording the payment fails.
        """
        payment = self.get(payment_id)
        if not payment.is_open:
            raise ValidationError(
                "Payment has already been resolved",
                details={"payment_id": payment_id, "status": payment.status.value},
            )

        if not succeeded:
            payment.status = PaymentStatus.CANCELLED
            track_payment_confirmation(False)
            self._retire(payment)
            logger.info("Payment cancelled by user", extra={"payment_id": payment_id})
            return payment

        request = payment.request
        try:
            saved = await self._store.save_transaction(
                NewTransaction(
                    upi_id=request.payee_address,
                    payee=request.payee_name,
                    amount=request.amount,
                    notes=request.notes,
                    category=payment.category,
                )
            )
        except StoreError as e:
            logger.error(
                f"Payment confirmed but could not be recorded: {e.message}",
                extra={"payment_id": payment_id},
            )
            raise

        payment.transaction = saved[0] if saved else None
        payment.status = PaymentStatus.CONFIRMED
        track_payment_confirmation(True)
        self._retire(payment)
        return payment

    def _retire(self, payment: PendingPayment) -> None:
        self._decided.append(payment.id)
        while len(self._decided) > self._max_decided:
            self._payments.pop(self._decided.popleft(), None)

    def watch_deep_links(self) -> DeepLinkSubscription:
        """Start reacting to deep links; the caller owns the subscription."""
        return register_deep_link_listener(self.handle_deep_link, self._hub)

    def handle_deep_link(self, url: str) -> None:
        """React to a URL re-entering the application."""
        data = extract_payment_data(url)
        if data is not None:
            self._register_from_link(data, url)
            return

        for payment in self.open_payments():
            payment.status = PaymentStatus.AWAITING_CONFIRMATION
            payment.callback_url = url

    def _register_from_link(self, data: dict[str, Any], url: str) -> None:
        amount = data.get("amount", "")
        request = UpiPaymentRequest(
            payee_address=str(data.get("upiId") or data.get("upi_id") or ""),
            payee_name=str(data.get("payee") or ""),
            amount=str(amount) if amount is not None else "",
            notes=str(data.get("notes") or ""),
        )
        payment = PendingPayment(
            request=request,
            category=data.get("category"),
            status=PaymentStatus.AWAITING_CONFIRMATION,
            callback_url=url,
        )
        self._payments[payment.id] = payment
        logger.info("Payment registered from deep link", extra={"payment_id": payment.id})
