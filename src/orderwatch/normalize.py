"""Normalization helpers.

Centralizes defensive parsing of values written by the host application,
which stores everything as strings and is not always consistent about
quoting.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

#: Accepted spellings of a true ``isOnline`` flag, compared after
#: stripping whitespace and surrounding double quotes, case-insensitively.
#: ``true``, ``"true"``, ``TRUE`` and ``" True "`` are all online.
TRUE_FLAG_VALUES: frozenset[str] = frozenset({"true", "1", "yes", "on"})


def parse_online_flag(value: Any) -> bool:
    """Normalize a stored ``isOnline`` value to a bool.

    Accepted forms are a real ``bool`` or a string from
    :data:`TRUE_FLAG_VALUES`, optionally wrapped in double quotes (the host
    app sometimes JSON-encodes the string before storing it). Anything else,
    including ``None``, is ``False``.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip()
    while len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1].strip()
    return text.lower() in TRUE_FLAG_VALUES


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a PostgREST ``timestamptz`` (ISO 8601) into an aware datetime.

    Naive values are assumed to be UTC. Unparseable values give ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
