"""Parsing and construction of `upi://pay` links."""

import json
from typing import Any
from urllib.parse import parse_qs, quote, unquote, urlsplit

from walletwise.logging_config import get_logger
from walletwise.upi.models import VPA_PATTERN, ParsedUpiQr, UpiPaymentRequest

logger = get_logger(__name__)

UPI_SCHEME = "upi"

# Characters encodeURIComponent leaves untouched
_COMPONENT_SAFE = "-_.!~*'()"


def validate_address(candidate: Any) -> bool:
    """Check a candidate string against the VPA pattern.

    Never raises; non-strings and empty strings are simply invalid.
    """
    if not isinstance(candidate, str):
        return False
    return VPA_PATTERN.fullmatch(candidate) is not None


def encode_component(value: str) -> str:
    """Percent-encode a value for use inside a query component."""
    return quote(value, safe=_COMPONENT_SAFE)


def _first(params: dict[str, list[str]], key: str, default: str = "") -> str:
    values = params.get(key)
    if not values or not values[0]:
        return default
    return values[0]


def parse_qr(payload: Any) -> ParsedUpiQr | None:
    """Decode a scanned UPI QR payload.

    Args:
        payload: Raw text decoded from the QR code.

    Returns:
        ParsedUpiQr, or None when the payload is not a `upi:` URL.
    """
    if not isinstance(payload, str):
        logger.warning("QR payload is not text", extra={"type": type(payload).__name__})
        return None

    try:
        parts = urlsplit(payload.strip())
    except ValueError as e:
        logger.warning(f"Unparsable QR payload: {e}")
        return None

    if not parts.scheme:
        logger.warning("QR payload is not a URL")
        return None

    if parts.scheme != UPI_SCHEME:
        logger.warning(
            "Not a valid UPI QR code",
            extra={"scheme": parts.scheme},
        )
        return None

    params = parse_qs(parts.query, keep_blank_values=True)

    return ParsedUpiQr(
        upi_id=_first(params, "pa"),
        payee=_first(params, "pn"),
        amount=_first(params, "am"),
        notes=_first(params, "tn"),
        currency=_first(params, "cu", default="INR"),
    )


def build_payment_url(request: UpiPaymentRequest) -> str:
    """Construct the `upi://pay` URL for a payment request.

    Address, amount and currency go in verbatim; name and notes are
    percent-encoded. The amount is not reformatted or re-validated here.
    """
    return (
        f"upi://pay?pa={request.payee_address}"
        f"&pn={encode_component(request.payee_name)}"
        f"&am={request.amount}"
        f"&cu={request.currency}"
        f"&tn={encode_component(request.notes)}"
    )


def extract_payment_data(url: str) -> dict[str, Any] | None:
    """Read the JSON `paymentData` parameter carried by a deep link.

    Returns:
        The decoded payment dict, or None if absent or malformed.
    """
    try:
        params = parse_qs(urlsplit(url).query)
    except ValueError as e:
        logger.warning(f"Unparsable deep link: {e}")
        return None

    raw = _first(params, "paymentData")
    if not raw:
        return None

    # Senders sometimes encode the JSON twice
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        try:
            data = json.loads(unquote(raw))
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed paymentData in deep link: {e}")
            return None

    if not isinstance(data, dict):
        logger.warning("paymentData in deep link is not an object")
        return None

    return data
