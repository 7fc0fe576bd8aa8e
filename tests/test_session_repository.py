from __future__ import annotations

import json

import pytest

from orderwatch.exceptions import OrderWatchStoreError
from orderwatch.session import StoreSessionRepository
from orderwatch.store import MemoryStore


def test_driver_session_reads_blob_and_flag() -> None:
    store = MemoryStore(
        {
            "driver": json.dumps({"id": 7, "company_id": "c-1", "email": "a@b.c"}),
            "isOnline": '"true"',
        }
    )

    session = StoreSessionRepository(store).load_driver_session()

    assert session is not None
    assert session.driver_id == "7"
    assert session.company_id == "c-1"
    assert session.is_online is True


def test_driver_session_absent_when_blob_missing_or_blank() -> None:
    assert StoreSessionRepository(MemoryStore()).load_driver_session() is None
    assert StoreSessionRepository(MemoryStore({"driver": "  "})).load_driver_session() is None


def test_double_encoded_driver_blob_is_accepted() -> None:
    blob = json.dumps(json.dumps({"id": "d1", "companyId": "c1"}))
    session = StoreSessionRepository(MemoryStore({"driver": blob, "isOnline": "true"})).load_driver_session()

    assert session is not None
    assert session.can_poll


@pytest.mark.parametrize("blob", ["{oops", "[1, 2]", '"just text"'])
def test_undecodable_driver_blob_raises(blob: str) -> None:
    with pytest.raises(OrderWatchStoreError) as exc_info:
        StoreSessionRepository(MemoryStore({"driver": blob})).load_driver_session()
    assert exc_info.value.key == "driver"


def test_credentials_unquoted_and_required() -> None:
    repo = StoreSessionRepository(MemoryStore({"supabase_url": '"https://p.supabase.co/"', "supabase_key": "k"}))
    creds = repo.load_credentials()

    assert creds is not None
    assert creds.base_url == "https://p.supabase.co"
    assert creds.api_key == "k"

    assert StoreSessionRepository(MemoryStore({"supabase_url": "https://x"})).load_credentials() is None
    assert StoreSessionRepository(MemoryStore({"supabase_url": "/", "supabase_key": "k"})).load_credentials() is None


def test_marker_round_trip_and_validation() -> None:
    store = MemoryStore()
    repo = StoreSessionRepository(store)

    assert repo.load_marker() is None
    repo.save_marker("o3")
    assert repo.load_marker() == "o3"
    assert store.get("last_notified_order_id") == "o3"

    with pytest.raises(ValueError):
        repo.save_marker("  ")
    assert repo.load_marker() == "o3"
