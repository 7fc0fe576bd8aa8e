from __future__ import annotations

import pytest

from orderwatch.detector import select_candidate
from orderwatch.models.order import OrderSummary


def _orders(*ids: str) -> list[OrderSummary]:
    return [OrderSummary(id=order_id) for order_id in ids]


def test_empty_list_has_no_candidate() -> None:
    assert select_candidate([], None) is None
    assert select_candidate([], "o1") is None


def test_no_marker_picks_newest() -> None:
    candidate = select_candidate(_orders("o5", "o4", "o3"), None)
    assert candidate is not None
    assert candidate.id == "o5"


def test_marker_in_middle_picks_order_directly_newer() -> None:
    candidate = select_candidate(_orders("o5", "o4", "o3", "o2", "o1"), "o3")
    assert candidate is not None
    assert candidate.id == "o4"


def test_marker_second_picks_newest() -> None:
    candidate = select_candidate(_orders("o5", "o4", "o3"), "o4")
    assert candidate is not None
    assert candidate.id == "o5"


def test_marker_first_has_no_candidate() -> None:
    assert select_candidate(_orders("o5", "o4", "o3"), "o5") is None


def test_marker_outside_window_picks_oldest_in_window() -> None:
    candidate = select_candidate(_orders("o9", "o8", "o7", "o6", "o5"), "o1")
    assert candidate is not None
    assert candidate.id == "o5"


@pytest.mark.parametrize("marker", ["o1", "o2", "o3"])
def test_candidate_is_never_the_marker_or_older(marker: str) -> None:
    orders = _orders("o3", "o2", "o1")
    candidate = select_candidate(orders, marker)
    if candidate is None:
        assert orders[0].id == marker
        return
    ids = [order.id for order in orders]
    assert candidate.id != marker
    assert ids.index(candidate.id) < ids.index(marker)
