from __future__ import annotations

import json
from pathlib import Path

import pytest

from orderwatch.cli import main


def _write_store(path: Path, **values: str) -> None:
    path.write_text(json.dumps(values), encoding="utf-8")


def test_show_state_redacts_api_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = tmp_path / "store.json"
    _write_store(
        store,
        driver=json.dumps({"id": "d1", "companyId": "c1"}),
        isOnline='"true"',
        supabase_url="https://p.supabase.co",
        supabase_key="super-secret",
        last_notified_order_id="o4",
    )

    code = main(["--store", str(store), "show-state"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["driver"] == {"driver_id": "d1", "company_id": "c1", "is_online": True}
    assert out["credentials"]["api_key"] == "<redacted>"
    assert out["credentials"]["base_url"] == "https://p.supabase.co"
    assert out["last_notified_order_id"] == "o4"


def test_poll_offline_driver_exits_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = tmp_path / "store.json"
    _write_store(store, driver=json.dumps({"id": "d1", "companyId": "c1"}), isOnline="false")

    code = main(["--store", str(store), "poll"])

    assert code == 0
    assert "skipped (offline)" in capsys.readouterr().out


def test_corrupt_store_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = tmp_path / "store.json"
    store.write_text("{nope", encoding="utf-8")

    code = main(["--store", str(store), "show-state"])

    assert code == 1
    assert "error:" in capsys.readouterr().err


def test_poll_with_corrupt_store_is_transient(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = tmp_path / "store.json"
    store.write_text("{nope", encoding="utf-8")

    code = main(["--store", str(store), "poll"])

    assert code == 1
    assert "transient failure" in capsys.readouterr().out
