#!/usr/bin/env python
"""Pay a UPI payee from the terminal.

Usage:
    python -m scripts.pay --qr "upi://pay?pa=shop@okaxis&pn=Shop&am=150"
    python -m scripts.pay --to shop@okaxis --name Shop --amount 150 --category Food

The payment is handed to the configured UPI launcher. It is recorded only
after the user confirms it went through.
"""

import argparse
import asyncio
import sys

from walletwise.config import get_settings
from walletwise.exceptions import WalletWiseError
from walletwise.logging_config import get_logger, setup_logging
from walletwise.payments.models import PaymentStatus
from walletwise.payments.service import PaymentService
from walletwise.transactions.store import SupabaseTransactionStore
from walletwise.upi.launcher import build_launcher
from walletwise.upi.links import parse_qr
from walletwise.upi.models import UpiPaymentRequest

logger = get_logger(__name__)


def build_request(args: argparse.Namespace) -> UpiPaymentRequest | None:
    """Assemble the payment request from a QR payload or explicit fields."""
    if args.qr:
        parsed = parse_qr(args.qr)
        if parsed is None:
            print("Invalid QR code, please try again")
            return None
        request = parsed.to_payment_request()
    else:
        request = UpiPaymentRequest(payee_address=args.to or "", amount="")

    updates = {
        "payee_address": args.to,
        "payee_name": args.name,
        "amount": args.amount,
        "notes": args.notes,
    }
    return request.model_copy(update={k: v for k, v in updates.items() if v is not None})


async def run_payment(args: argparse.Namespace) -> bool:
    """Dispatch a payment and record it if the user confirms.

    Returns:
        True unless dispatch or recording failed.
    """
    settings = get_settings()
    setup_logging(level=args.log_level)

    request = build_request(args)
    if request is None:
        return False

    errors = request.validation_errors()
    if errors:
        for message in errors.values():
            print(message)
        return False

    store = SupabaseTransactionStore(settings=settings.store)
    service = PaymentService(launcher=build_launcher(settings.upi), store=store)

    try:
        payment = await service.initiate(request, category=args.category)
        print(f"Opened UPI app for {request.payee_name or request.payee_address}: Rs. {request.amount}")

        answer = await asyncio.to_thread(input, "Did the payment go through? [y/N] ")
        payment = await service.confirm(payment.id, answer.strip().lower() in ("y", "yes"))
    except WalletWiseError as e:
        logger.error(f"Payment failed: {e.message}", extra={"details": e.details})
        print(e.message)
        return False
    finally:
        await store.close()

    if payment.status == PaymentStatus.CONFIRMED:
        print("Payment recorded.")
    else:
        print("Payment not recorded.")
    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Pay a UPI payee and record the payment",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--qr", default=None, help="Scanned UPI QR payload")
    parser.add_argument("--to", default=None, help="Payee UPI ID (overrides the QR)")
    parser.add_argument("--name", default=None, help="Payee name")
    parser.add_argument("--amount", default=None, help="Amount in rupees")
    parser.add_argument("--notes", default=None, help="Transaction note")
    parser.add_argument("--category", default=None, help="Spending category")
    parser.add_argument("--log-level", default="WARNING", help="Log level")

    args = parser.parse_args()
    if not args.qr and not args.to:
        parser.error("either --qr or --to is required")

    sys.exit(0 if asyncio.run(run_payment(args)) else 1)


if __name__ == "__main__":
    main()
