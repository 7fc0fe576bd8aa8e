from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from orderwatch._api.orders import build_auth_headers, build_orders_params, fetch_pending_orders, parse_orders
from orderwatch.config import OrderWatchConfig
from orderwatch.exceptions import OrderWatchResponseError
from orderwatch.models.session import BackendCredentials, DriverSession


class _StaticTransport:
    def __init__(self, body: Any) -> None:
        self._body = body
        self.url: str | None = None

    async def get_json(self, url: str, *, params: Mapping[str, str], headers: Mapping[str, str]) -> Any:
        self.url = url
        return self._body


def test_build_orders_params_uses_config() -> None:
    params = build_orders_params(OrderWatchConfig(fetch_limit=3, order_status="Open"), "c-7")

    assert params["company_id"] == "eq.c-7"
    assert params["status"] == "eq.Open"
    assert params["limit"] == "3"
    assert params["order"] == "created_at.desc"


def test_build_auth_headers_send_key_twice() -> None:
    headers = build_auth_headers(BackendCredentials(base_url="https://x", api_key="secret"))

    assert headers["apikey"] == "secret"
    assert headers["Authorization"] == "Bearer secret"
    assert headers["Prefer"] == "return=representation"


def test_parse_orders_keeps_backend_order() -> None:
    orders = parse_orders([{"id": "b"}, {"id": "a"}, {"id": "c"}])
    assert [order.id for order in orders] == ["b", "a", "c"]


@pytest.mark.parametrize("body", [None, {}, "[]", 5, {"code": "PGRST301"}])
def test_parse_orders_rejects_non_array(body: Any) -> None:
    with pytest.raises(OrderWatchResponseError):
        parse_orders(body)


def test_parse_orders_rejects_non_object_rows() -> None:
    with pytest.raises(OrderWatchResponseError):
        parse_orders([{"id": "a"}, "b"])


@pytest.mark.asyncio
async def test_fetch_pending_orders_caps_window() -> None:
    transport = _StaticTransport([{"id": str(i)} for i in range(10, 0, -1)])
    driver = DriverSession(driver_id="d", company_id="c", is_online=True)
    credentials = BackendCredentials(base_url="https://p.supabase.co", api_key="k")

    orders = await fetch_pending_orders(OrderWatchConfig(), driver, credentials, transport)

    assert [order.id for order in orders] == ["10", "9", "8", "7", "6"]
    assert transport.url == "https://p.supabase.co/rest/v1/orders"
