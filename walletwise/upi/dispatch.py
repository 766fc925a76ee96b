"""Dispatch of payment requests to an installed UPI app."""

from walletwise.exceptions import UpiDispatchError, ValidationError
from walletwise.logging_config import get_logger
from walletwise.observability.metrics import track_payment_dispatch
from walletwise.upi.launcher import FLAG_ACTIVITY_NEW_TASK, VIEW_ACTION, UrlLauncher
from walletwise.upi.links import build_payment_url
from walletwise.upi.models import UpiPaymentRequest

logger = get_logger(__name__)


async def dispatch_payment(request: UpiPaymentRequest, launcher: UrlLauncher) -> bool:
    """Hand a payment request to the platform's UPI handler.

    The result reports only whether the handoff succeeded. Whether the
    payment itself went through is unknown here and must be confirmed by
    the user or by a deep-link re-entry.

    Args:
        request: Payment to dispatch.
        launcher: Platform URL launcher.

    Returns:
        True if the URL was handed off; False if the secondary launch
        path was needed and failed.

    Raises:
        ValidationError: If the request is not valid for dispatch.
        UpiDispatchError: If a launcher without pre-check fails to open
            the URL.
    """
    errors = request.validation_errors()
    if errors:
        raise ValidationError("Payment request is not valid for dispatch", details=errors)

    url = build_payment_url(request)

    if not launcher.supports_precheck:
        try:
            await launcher.open(url)
        except UpiDispatchError:
            track_payment_dispatch("error")
            raise
        track_payment_dispatch("opened")
        return True

    if await launcher.can_open(url):
        await launcher.open(url)
        track_payment_dispatch("opened")
        return True

    logger.info("No default UPI handler, trying explicit activity launch")
    try:
        await launcher.start_activity(VIEW_ACTION, url, flags=FLAG_ACTIVITY_NEW_TASK)
    except UpiDispatchError as e:
        logger.error(f"Error launching intent: {e.message}", extra={"details": e.details})
        track_payment_dispatch("failed")
        return False

    track_payment_dispatch("activity")
    return True
