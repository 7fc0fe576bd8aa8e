from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from orderwatch.models import BackendCredentials, DriverSession, OrderSummary, PollOutcome, PollStatus, SkipReason


def test_order_summary_flattens_embedded_client_and_local() -> None:
    order = OrderSummary.model_validate(
        {
            "id": 42,
            "delivery_address": "Av. Siempre Viva 742",
            "suggested_price": "350.5",
            "created_at": "2026-03-01T12:00:00+00:00",
            "clients": {"name": "Marge", "phone": "555-1234"},
            "locals": {"name": "Krusty Burger", "address": "Main St 1"},
            "company_id": "c-1",
        }
    )

    assert order.id == "42"
    assert order.display_id == "ORD-42"
    assert order.client_name == "Marge"
    assert order.client_phone == "555-1234"
    assert order.local_name == "Krusty Burger"
    assert order.local_address == "Main St 1"
    assert order.delivery_address == "Av. Siempre Viva 742"
    assert order.suggested_price == 350.5
    assert order.created_at == datetime(2026, 3, 1, 12, tzinfo=UTC)
    assert order.raw["company_id"] == "c-1"
    assert not order.price_to_negotiate


def test_order_summary_defaults_for_missing_fields() -> None:
    order = OrderSummary.model_validate(
        {"id": "o1", "clients": None, "locals": {"name": ""}, "delivery_address": "  ", "suggested_price": None}
    )

    assert order.client_name == "Client"
    assert order.local_name == "Local"
    assert order.delivery_address == "No address"
    assert order.suggested_price == 0.0
    assert order.created_at is None
    assert order.price_to_negotiate


def test_order_summary_requires_id() -> None:
    with pytest.raises(ValidationError):
        OrderSummary.model_validate({"delivery_address": "x"})
    with pytest.raises(ValidationError):
        OrderSummary.model_validate({"id": "   "})


def test_order_summary_is_frozen() -> None:
    order = OrderSummary(id="o1")
    with pytest.raises(ValidationError):
        order.id = "o2"  # type: ignore[misc]


def test_driver_session_accepts_camel_and_snake_company_id() -> None:
    camel = DriverSession.model_validate({"id": "d1", "companyId": "c1", "is_online": True})
    snake = DriverSession.model_validate({"id": "d1", "company_id": "c1", "is_online": True})

    assert camel.company_id == snake.company_id == "c1"
    assert camel.can_poll and snake.can_poll


def test_driver_session_without_ids_cannot_poll() -> None:
    session = DriverSession.model_validate({"id": None, "companyId": "", "is_online": True})

    assert session.driver_id == ""
    assert not session.has_identity
    assert not session.can_poll


def test_backend_credentials_strip_trailing_slash_and_reject_blank() -> None:
    creds = BackendCredentials(base_url=" https://p.supabase.co/ ", api_key=" k ")
    assert creds.base_url == "https://p.supabase.co"
    assert creds.api_key == "k"
    assert "api_key" not in repr(creds)

    with pytest.raises(ValidationError):
        BackendCredentials(base_url="", api_key="k")
    with pytest.raises(ValidationError):
        BackendCredentials(base_url="https://x", api_key="  ")


def test_poll_outcome_retry_only_for_transient_failure() -> None:
    order = OrderSummary(id="o1")

    assert not PollOutcome.skipped(SkipReason.OFFLINE).should_retry
    assert not PollOutcome.notified(order).should_retry
    assert not PollOutcome.no_new_order().should_retry
    failure = PollOutcome.transient_failure(RuntimeError("boom"))
    assert failure.should_retry
    assert failure.status == PollStatus.TRANSIENT_FAILURE
    assert failure.error == "RuntimeError: boom"
    assert str(PollOutcome.notified(order)) == "notified ORD-o1"
    assert str(PollOutcome.skipped(SkipReason.UNCONFIGURED)) == "skipped (unconfigured)"
