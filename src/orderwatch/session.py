"""Session repository: typed, read-only snapshots over the key/value store."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from orderwatch._constants import (
    KEY_DRIVER,
    KEY_IS_ONLINE,
    KEY_LAST_NOTIFIED_ORDER_ID,
    KEY_SUPABASE_KEY,
    KEY_SUPABASE_URL,
)
from orderwatch.exceptions import OrderWatchStoreError
from orderwatch.models.session import BackendCredentials, DriverSession
from orderwatch.normalize import parse_online_flag, safe_str
from orderwatch.store import KeyValueStore

_logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """What the detector needs from the surrounding application's storage."""

    def load_driver_session(self) -> DriverSession | None:
        ...

    def load_credentials(self) -> BackendCredentials | None:
        ...

    def load_marker(self) -> str | None:
        ...

    def save_marker(self, order_id: str) -> None:
        ...


def _unquote(value: str | None) -> str | None:
    """Strip one layer of JSON string encoding, if present."""
    text = safe_str(value)
    if text is None:
        return None
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            return text
        return safe_str(decoded) if isinstance(decoded, str) else text
    return text


def _decode_driver_blob(raw: str) -> dict[str, Any]:
    try:
        decoded: Any = json.loads(raw)
        # Some host versions JSON-encode the already-encoded object once more.
        if isinstance(decoded, str):
            decoded = json.loads(decoded)
    except json.JSONDecodeError as exc:
        raise OrderWatchStoreError(f"Stored {KEY_DRIVER!r} is not valid JSON", key=KEY_DRIVER) from exc
    if not isinstance(decoded, dict):
        raise OrderWatchStoreError(f"Stored {KEY_DRIVER!r} must be a JSON object", key=KEY_DRIVER)
    return decoded


class StoreSessionRepository:
    """:class:`SessionRepository` reading the host application's key/value store.

    Every call reads the store again; nothing is cached between polls.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load_driver_session(self) -> DriverSession | None:
        """Return the driver snapshot, or ``None`` when no driver is stored.

        Raises
        ------
        OrderWatchStoreError
            If the stored driver blob cannot be decoded.
        """
        raw = self._store.get(KEY_DRIVER)
        if safe_str(raw) is None:
            return None
        assert raw is not None  # noqa: S101
        blob = _decode_driver_blob(raw)
        is_online = parse_online_flag(self._store.get(KEY_IS_ONLINE))
        try:
            return DriverSession.model_validate({**blob, "is_online": is_online})
        except ValidationError as exc:
            raise OrderWatchStoreError(f"Stored {KEY_DRIVER!r} has invalid fields: {exc}", key=KEY_DRIVER) from exc

    def load_credentials(self) -> BackendCredentials | None:
        base_url = _unquote(self._store.get(KEY_SUPABASE_URL))
        api_key = _unquote(self._store.get(KEY_SUPABASE_KEY))
        if base_url is None or api_key is None:
            return None
        try:
            return BackendCredentials(base_url=base_url, api_key=api_key)
        except ValidationError:
            _logger.debug("Stored backend credentials are unusable", exc_info=True)
            return None

    def load_marker(self) -> str | None:
        return _unquote(self._store.get(KEY_LAST_NOTIFIED_ORDER_ID))

    def save_marker(self, order_id: str) -> None:
        marker = safe_str(order_id)
        if marker is None:
            raise ValueError("marker order id must be non-empty")
        self._store.set(KEY_LAST_NOTIFIED_ORDER_ID, marker)
