"""Inbound deep-link channel and scoped listener subscriptions."""

from collections.abc import Callable
from types import TracebackType

from walletwise.logging_config import get_logger

logger = get_logger(__name__)

DeepLinkCallback = Callable[[str], None]


class DeepLinkHub:
    """Fan-out channel for URLs re-entering the application.

    Payment apps may or may not call back; nothing downstream may rely on
    a URL ever arriving.
    """

    def __init__(self) -> None:
        self._subscriptions: list[DeepLinkSubscription] = []

    @property
    def listener_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._subscriptions)

    def subscribe(self, callback: DeepLinkCallback) -> "DeepLinkSubscription":
        """Register a callback for every inbound URL."""
        subscription = DeepLinkSubscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: "DeepLinkSubscription") -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, url: str) -> int:
        """Deliver an inbound URL to all active listeners.

        Listeners are called in registration order. A failing listener is
        logged and does not stop delivery to the others.

        Returns:
            Number of listeners the URL was delivered to.
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback(url)
            except Exception:
                logger.exception("Deep link listener failed", extra={"url": url})
                continue
            delivered += 1

        logger.debug(f"Delivered deep link to {delivered} listeners")
        return delivered


class DeepLinkSubscription:
    """Handle for a deep-link listener.

    Calling the handle (or `close()`) cancels the subscription for good.
    It is also a context manager so the owner can scope it to a block.
    """

    def __init__(self, hub: DeepLinkHub, callback: DeepLinkCallback) -> None:
        self._hub = hub
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        """Whether the listener still receives URLs."""
        return self._active

    def close(self) -> None:
        """Cancel the subscription. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._hub._remove(self)

    def __call__(self) -> None:
        self.close()

    def __enter__(self) -> "DeepLinkSubscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def register_deep_link_listener(
    callback: DeepLinkCallback,
    hub: DeepLinkHub,
) -> DeepLinkSubscription:
    """Subscribe to inbound URLs.

    Args:
        callback: Called with each inbound URL.
        hub: Inbound URL channel.

    Returns:
        Subscription; call it to unsubscribe.
    """
    return hub.subscribe(callback)
