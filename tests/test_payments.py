"""Tests for the payment flow."""

import json
from unittest.mock import AsyncMock
from urllib.parse import quote

import pytest

from walletwise.exceptions import ErrorCode, StoreError, UpiDispatchError, ValidationError
from walletwise.payments.models import PaymentStatus
from walletwise.payments.service import NO_UPI_APP_MESSAGE, PaymentService
from walletwise.transactions.models import NewTransaction, Transaction
from walletwise.upi.deeplink import DeepLinkHub
from walletwise.upi.launcher import UrlLauncher
from walletwise.upi.models import UpiPaymentRequest

CALLBACK = "walletwise://payment-callback?status=SUCCESS"


@pytest.fixture
def payment_request() -> UpiPaymentRequest:
    return UpiPaymentRequest(
        payee_address="chai@ybl",
        payee_name="Chai Point",
        amount="90",
        notes="tea",
    )


@pytest.fixture
def service(launcher: AsyncMock, mock_store: AsyncMock) -> PaymentService:
    mock_store.save_transaction.return_value = [
        Transaction(id=11, amount=90.0, payee="Chai Point", upi_id="chai@ybl", category="Food")
    ]
    return PaymentService(launcher=launcher, store=mock_store, hub=DeepLinkHub())


class TestInitiate:
    """Tests for handing payments to the UPI app."""

    async def test_dispatched(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """A successful handoff is tracked but not yet saved."""
        payment = await service.initiate(payment_request, category="Food")

        assert payment.status == PaymentStatus.DISPATCHED
        assert service.get(payment.id) is payment
        assert service.open_payments() == [payment]
        mock_store.save_transaction.assert_not_called()

    async def test_invalid_request(self, service: PaymentService, launcher: AsyncMock) -> None:
        """Invalid requests are rejected before dispatch."""
        with pytest.raises(ValidationError):
            await service.initiate(UpiPaymentRequest(payee_address="bad", amount="1"))
        launcher.open.assert_not_called()

    async def test_no_upi_app(self, mock_store: AsyncMock, payment_request: UpiPaymentRequest) -> None:
        """A failed secondary launch tells the user to install a UPI app."""
        launcher = AsyncMock(spec=UrlLauncher)
        launcher.supports_precheck = True
        launcher.can_open.return_value = False
        launcher.start_activity.side_effect = UpiDispatchError("No Activity found")
        service = PaymentService(launcher=launcher, store=mock_store)

        with pytest.raises(UpiDispatchError) as exc_info:
            await service.initiate(payment_request)

        assert exc_info.value.message == NO_UPI_APP_MESSAGE
        assert exc_info.value.code == ErrorCode.UPI_NO_HANDLER
        assert service.open_payments() == []

    def test_unknown_payment(self, service: PaymentService) -> None:
        """Unknown ids raise a not-found error."""
        with pytest.raises(ValidationError) as exc_info:
            service.get("missing")
        assert exc_info.value.code == ErrorCode.PAYMENT_NOT_FOUND


class TestConfirm:
    """Tests for the user's yes/no confirmation."""

    async def test_confirmed_saves_transaction(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """Yes records the payment exactly as dispatched."""
        payment = await service.initiate(payment_request, category="Food")

        confirmed = await service.confirm(payment.id, succeeded=True)

        assert confirmed.status == PaymentStatus.CONFIRMED
        assert confirmed.transaction is not None
        assert confirmed.transaction.id == 11
        mock_store.save_transaction.assert_awaited_once_with(
            NewTransaction(
                upi_id="chai@ybl",
                payee="Chai Point",
                amount="90",
                notes="tea",
                category="Food",
            )
        )

    async def test_cancelled_saves_nothing(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """No closes the payment without recording it."""
        payment = await service.initiate(payment_request)

        cancelled = await service.confirm(payment.id, succeeded=False)

        assert cancelled.status == PaymentStatus.CANCELLED
        assert cancelled.transaction is None
        mock_store.save_transaction.assert_not_called()

    async def test_double_confirmation(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
    ) -> None:
        """A decided payment cannot be decided again."""
        payment = await service.initiate(payment_request)
        await service.confirm(payment.id, succeeded=True)

        with pytest.raises(ValidationError, match="already been resolved"):
            await service.confirm(payment.id, succeeded=True)

    async def test_store_failure_keeps_payment_open(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """A failed write propagates and the user can retry."""
        payment = await service.initiate(payment_request)
        mock_store.save_transaction.side_effect = StoreError("Transaction store returned 500")

        with pytest.raises(StoreError):
            await service.confirm(payment.id, succeeded=True)

        assert service.get(payment.id).is_open

    async def test_decided_payments_are_capped(
        self,
        launcher: AsyncMock,
        mock_store: AsyncMock,
        payment_request: UpiPaymentRequest,
    ) -> None:
        """Only the most recent decided payments stay retrievable."""
        service = PaymentService(launcher=launcher, store=mock_store, max_decided=2)
        payments = [await service.initiate(payment_request) for _ in range(3)]
        for payment in payments:
            await service.confirm(payment.id, succeeded=False)

        with pytest.raises(ValidationError) as exc_info:
            service.get(payments[0].id)
        assert exc_info.value.code == ErrorCode.PAYMENT_NOT_FOUND

        assert service.get(payments[1].id).status == PaymentStatus.CANCELLED
        assert service.get(payments[2].id).status == PaymentStatus.CANCELLED

    async def test_open_payments_are_kept(
        self,
        launcher: AsyncMock,
        mock_store: AsyncMock,
        payment_request: UpiPaymentRequest,
    ) -> None:
        """Eviction never drops a payment still waiting for an answer."""
        service = PaymentService(launcher=launcher, store=mock_store, max_decided=1)
        waiting = await service.initiate(payment_request)
        for _ in range(3):
            decided = await service.initiate(payment_request)
            await service.confirm(decided.id, succeeded=False)

        assert service.get(waiting.id).is_open
        assert [p.id for p in service.open_payments()] == [waiting.id]


class TestDeepLinks:
    """Tests for deep-link re-entry."""

    async def test_callback_moves_open_payments_to_awaiting(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """A bare callback asks for confirmation but never saves."""
        payment = await service.initiate(payment_request)

        with service.watch_deep_links():
            service.hub.publish(CALLBACK)

        assert payment.status == PaymentStatus.AWAITING_CONFIRMATION
        assert payment.callback_url == CALLBACK
        mock_store.save_transaction.assert_not_called()

    def test_payment_data_registers_payment(self, service: PaymentService) -> None:
        """A link carrying paymentData opens a payment awaiting confirmation."""
        data = {"upiId": "shop@okaxis", "payee": "Shop", "amount": 250, "category": "Bills"}
        url = f"walletwise://callback?paymentData={quote(json.dumps(data))}"

        service.handle_deep_link(url)

        [payment] = service.open_payments()
        assert payment.status == PaymentStatus.AWAITING_CONFIRMATION
        assert payment.request.payee_address == "shop@okaxis"
        assert payment.request.amount == "250"
        assert payment.category == "Bills"

    async def test_released_subscription_ignores_links(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
    ) -> None:
        """After the owner releases it, links no longer reach the service."""
        payment = await service.initiate(payment_request)
        subscription = service.watch_deep_links()
        subscription()

        assert service.hub.publish(CALLBACK) == 0
        assert payment.status == PaymentStatus.DISPATCHED

    async def test_confirmation_after_callback(
        self,
        service: PaymentService,
        payment_request: UpiPaymentRequest,
        mock_store: AsyncMock,
    ) -> None:
        """Awaiting payments can still be confirmed."""
        payment = await service.initiate(payment_request)
        service.handle_deep_link(CALLBACK)

        await service.confirm(payment.id, succeeded=True)

        assert payment.status == PaymentStatus.CONFIRMED
        mock_store.save_transaction.assert_awaited_once()
