"""Base model for backend and store payloads.

Every payload model inherits from :class:`OrderWatchModel` which provides:

* frozen instances, so a snapshot loaded for one poll can't be mutated;
* a ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used instead;
* a ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def clean_payload(values: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *values* without ``None`` or blank-string entries."""
    cleaned: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        cleaned[key] = value
    return cleaned


class OrderWatchModel(BaseModel):
    """Base for models parsed from untrusted JSON."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned = clean_payload(values)
        # Keep a caller-provided raw (kwargs construction); otherwise stash the payload.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
