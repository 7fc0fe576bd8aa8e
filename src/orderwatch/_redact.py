"""Masking of credentials and customer data before they reach the logs.

Two payloads pass through here: request headers (API key, bearer token)
and order rows, which embed the client's name and phone number and the
delivery and pickup addresses. Store names and order ids stay readable
so traces remain useful.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

_SECRET_KEYS: frozenset[str] = frozenset(
    {"apikey", "api_key", "supabase_key", "authorization", "password", "access_token", "refresh_token", "cookie"}
)

# Flat keys holding customer data, on order rows and on OrderSummary dumps.
_PERSONAL_KEYS: frozenset[str] = frozenset(
    {"phone", "client_phone", "client_name", "delivery_address", "address", "local_address"}
)

# Keys redacted only inside the named embedded object.
_PERSONAL_NESTED_KEYS: dict[str, frozenset[str]] = {
    "clients": frozenset({"name"}),
}

_BEARER_RE = re.compile(r"^\s*bearer\s+\S+", re.IGNORECASE)
_JWT_RE = re.compile(r"^eyJ[\w-]+\.[\w-]+\.[\w-]*$")


def _looks_like_token(value: str) -> bool:
    return bool(_BEARER_RE.match(value) or _JWT_RE.match(value))


def _mask_key(key: str, parent: str | None) -> bool:
    lowered = key.lower()
    if lowered in _SECRET_KEYS or lowered in _PERSONAL_KEYS:
        return True
    return parent is not None and lowered in _PERSONAL_NESTED_KEYS.get(parent.lower(), frozenset())


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a copy of *value* with secrets and customer data masked.

    Strings shaped like a bearer header or a JWT are masked whatever key
    holds them. Other strings longer than *max_string* are shortened.
    """

    def walk(item: Any, parent: str | None) -> Any:
        if isinstance(item, str):
            if _looks_like_token(item):
                return REDACTED
            return item if len(item) <= max_string else f"{item[:max_string]}... ({len(item)} chars)"
        if item is None or isinstance(item, (bool, int, float)):
            return item
        if isinstance(item, Mapping):
            return {
                str(k): REDACTED if _mask_key(str(k), parent) else walk(v, str(k))
                for k, v in item.items()
            }
        if isinstance(item, (list, tuple)):
            # Rows of an embedded list keep the list's key as their parent.
            return [walk(v, parent) for v in item]
        return type(item).__name__

    return walk(value, None)
