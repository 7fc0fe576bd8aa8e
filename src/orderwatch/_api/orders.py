"""Pending orders endpoint.

Endpoint:
  - GET /rest/v1/orders (PostgREST)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from orderwatch._constants import ORDER_SELECT, ORDERS_ENDPOINT
from orderwatch._transport import Transport
from orderwatch.config import OrderWatchConfig
from orderwatch.exceptions import OrderWatchResponseError
from orderwatch.models.order import OrderSummary
from orderwatch.models.session import BackendCredentials, DriverSession

_logger = logging.getLogger(__name__)


def build_auth_headers(credentials: BackendCredentials) -> dict[str, str]:
    """Headers authenticating with the project API key.

    The same key is sent raw (``apikey``) and as a bearer token.
    """
    return {
        "apikey": credentials.api_key,
        "Authorization": f"Bearer {credentials.api_key}",
        "Accept": "application/json",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def build_orders_params(config: OrderWatchConfig, company_id: str) -> dict[str, str]:
    """Query string for the newest pending orders of *company_id*."""
    return {
        "company_id": f"eq.{company_id}",
        "status": f"eq.{config.order_status}",
        "order": "created_at.desc",
        "limit": str(config.fetch_limit),
        "select": ORDER_SELECT,
    }


def parse_orders(body: Any, *, endpoint: str = ORDERS_ENDPOINT) -> list[OrderSummary]:
    """Validate the response body into order summaries, keeping backend order.

    Rows that are objects but lack a usable ``id`` are dropped.

    Raises
    ------
    OrderWatchResponseError
        If the body is not a JSON array of objects.
    """
    if not isinstance(body, list):
        raise OrderWatchResponseError(
            f"Expected a JSON array from {endpoint}, got {type(body).__name__}",
            endpoint=endpoint,
        )

    orders: list[OrderSummary] = []
    for index, row in enumerate(body):
        if not isinstance(row, dict):
            raise OrderWatchResponseError(
                f"Row {index} from {endpoint} is not an object: {type(row).__name__}",
                endpoint=endpoint,
            )
        try:
            orders.append(OrderSummary.model_validate(row))
        except ValidationError:
            _logger.debug("Dropping order row %d without a usable id", index, exc_info=True)
    return orders


async def fetch_pending_orders(
    config: OrderWatchConfig,
    driver: DriverSession,
    credentials: BackendCredentials,
    transport: Transport,
) -> list[OrderSummary]:
    """Fetch the most recent pending orders for the driver's company.

    Parameters
    ----------
    config : OrderWatchConfig
        Supplies the status filter and window size.
    driver : DriverSession
        Session whose ``company_id`` filters the query.
    credentials : BackendCredentials
        Backend URL and API key.
    transport : Transport
        HTTP transport.

    Returns
    -------
    list[OrderSummary]
        At most ``config.fetch_limit`` orders, newest first.

    Raises
    ------
    OrderWatchTransportError
        On network failures, timeouts, non-2xx statuses or malformed bodies.
    """
    url = f"{credentials.base_url}{ORDERS_ENDPOINT}"
    body = await transport.get_json(
        url,
        params=build_orders_params(config, driver.company_id),
        headers=build_auth_headers(credentials),
    )
    orders = parse_orders(body, endpoint=ORDERS_ENDPOINT)
    _logger.debug(
        "Fetched %d pending orders for company %s: %s",
        len(orders),
        driver.company_id,
        [order.id for order in orders],
    )
    # The window is capped server-side; enforce it in case the backend ignores `limit`.
    return orders[: config.fetch_limit]
