"""UPI link parsing, construction and dispatch."""

from walletwise.upi.deeplink import (
    DeepLinkHub,
    DeepLinkSubscription,
    register_deep_link_listener,
)
from walletwise.upi.dispatch import dispatch_payment
from walletwise.upi.launcher import (
    AdbIntentLauncher,
    SystemUrlLauncher,
    UrlLauncher,
    build_launcher,
)
from walletwise.upi.links import (
    build_payment_url,
    extract_payment_data,
    parse_qr,
    validate_address,
)
from walletwise.upi.models import ParsedUpiQr, UpiPaymentRequest

__all__ = [
    "AdbIntentLauncher",
    "DeepLinkHub",
    "DeepLinkSubscription",
    "ParsedUpiQr",
    "SystemUrlLauncher",
    "UpiPaymentRequest",
    "UrlLauncher",
    "build_launcher",
    "build_payment_url",
    "dispatch_payment",
    "extract_payment_data",
    "parse_qr",
    "register_deep_link_listener",
    "validate_address",
]
