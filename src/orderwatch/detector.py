"""New-order detection.

One :meth:`NewOrderDetector.poll` reads the driver session, asks the backend
for the newest pending orders, and notifies about at most one order the
driver has not been shown yet. The id of that order becomes the persisted
marker, so the next poll with unchanged data finds nothing new.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from orderwatch._api.orders import fetch_pending_orders
from orderwatch._transport import Transport
from orderwatch.config import OrderWatchConfig
from orderwatch.exceptions import OrderWatchError
from orderwatch.formatting import format_order_message
from orderwatch.models.order import OrderSummary
from orderwatch.models.outcome import PollOutcome, SkipReason
from orderwatch.notifications import NotificationSink
from orderwatch.session import SessionRepository

_logger = logging.getLogger(__name__)


def select_candidate(orders: Sequence[OrderSummary], marker: str | None) -> OrderSummary | None:
    """Pick the order to notify about from a newest-first list.

    Without a marker the newest order is the candidate. Otherwise the list
    is walked from newest to oldest until the marker is found; the last
    order seen before it (the one directly newer than the marker) is the
    candidate. When the newest order is the marker there is no candidate.
    When the marker is not in the list at all, the oldest order of the
    window is the candidate.
    """
    if not orders:
        return None
    if marker is None:
        return orders[0]

    candidate: OrderSummary | None = None
    for order in orders:
        if order.id == marker:
            break
        candidate = order
    return candidate


class NewOrderDetector:
    """Detects unseen pending orders and raises one notification per poll.

    ``poll`` never raises for operational problems: absent configuration
    resolves to a skipped outcome, everything else to a transient failure
    that the scheduler host retries.
    """

    def __init__(
        self,
        config: OrderWatchConfig,
        repository: SessionRepository,
        transport: Transport,
        sink: NotificationSink,
    ) -> None:
        self._config = config
        self._repository = repository
        self._transport = transport
        self._sink = sink

    async def poll(self) -> PollOutcome:
        """Run one detection pass."""
        try:
            outcome = await self._poll()
        except asyncio.CancelledError:
            raise
        except OrderWatchError as exc:
            _logger.warning("Order poll failed, will retry: %s", exc)
            return PollOutcome.transient_failure(exc)
        except Exception as exc:
            _logger.exception("Unexpected error during order poll")
            return PollOutcome.transient_failure(exc)

        _logger.debug("Order poll finished: %s", outcome)
        return outcome

    async def _poll(self) -> PollOutcome:
        driver = self._repository.load_driver_session()
        if driver is None or not driver.is_online:
            _logger.debug("Driver offline or not logged in, skipping poll")
            return PollOutcome.skipped(SkipReason.OFFLINE)
        if not driver.has_identity:
            _logger.debug("Driver session lacks driver or company id, skipping poll")
            return PollOutcome.skipped(SkipReason.MISSING_IDENTITY)

        credentials = self._repository.load_credentials()
        if credentials is None:
            _logger.debug("Backend credentials not configured, skipping poll")
            return PollOutcome.skipped(SkipReason.UNCONFIGURED)

        marker = self._repository.load_marker()
        _logger.debug("Last notified order: %s", marker or "none")

        orders = await fetch_pending_orders(self._config, driver, credentials, self._transport)

        candidate = select_candidate(orders, marker)
        if candidate is None:
            _logger.debug("No new orders (last notified: %s)", marker)
            return PollOutcome.no_new_order()

        title, body = format_order_message(candidate, self._config.locale)
        await self._sink.notify(title, body)
        self._repository.save_marker(candidate.id)

        _logger.info("Notified new order %s", candidate.display_id)
        return PollOutcome.notified(candidate)
