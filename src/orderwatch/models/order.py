"""Pending order model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from orderwatch.models._base import OrderWatchModel, clean_payload
from orderwatch.normalize import parse_timestamp, safe_float, safe_str

DEFAULT_CLIENT_NAME = "Client"
DEFAULT_LOCAL_NAME = "Local"
DEFAULT_DELIVERY_ADDRESS = "No address"


class OrderSummary(OrderWatchModel):
    """One row of the pending-orders query.

    The backend embeds the client and the pickup location as nested
    ``clients`` and ``locals`` objects; they are flattened into
    ``client_*`` and ``local_*`` fields here.

    Parameters
    ----------
    id : str
        Order identifier. Integer ids are converted to strings.
    client_name : str
        Customer display name.
    local_name : str
        Pickup location (restaurant/shop) display name.
    delivery_address : str
        Drop-off address.
    suggested_price : float
        Suggested delivery fee. ``0.0`` means "to negotiate".
    created_at : datetime or None
        Creation time, timezone-aware.
    client_phone : str or None
        Customer phone number.
    local_address : str or None
        Pickup address.
    raw : dict
        Original row.
    """

    id: str
    client_name: str = DEFAULT_CLIENT_NAME
    local_name: str = DEFAULT_LOCAL_NAME
    delivery_address: str = Field(
        default=DEFAULT_DELIVERY_ADDRESS,
        validation_alias=AliasChoices("delivery_address", "deliveryAddress"),
    )
    suggested_price: float = Field(
        default=0.0,
        validation_alias=AliasChoices("suggested_price", "suggestedPrice"),
    )
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))
    client_phone: str | None = None
    local_address: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_embedded(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        for embed_key, prefix in (("clients", "client"), ("locals", "local")):
            embedded = values.get(embed_key)
            if isinstance(embedded, dict):
                embedded = clean_payload(embedded)
                if "name" in embedded:
                    merged.setdefault(f"{prefix}_name", embedded["name"])
                field = "phone" if prefix == "client" else "address"
                if field in embedded:
                    merged.setdefault(f"{prefix}_{field}", embedded[field])
        merged.setdefault("raw", values)
        return merged

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("order id must be non-empty")
        return text

    @field_validator("client_name", "local_name", "delivery_address", "client_phone", "local_address", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("suggested_price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None else 0.0

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @property
    def display_id(self) -> str:
        """Identifier shown to the driver."""
        return f"ORD-{self.id}"

    @property
    def price_to_negotiate(self) -> bool:
        return self.suggested_price <= 0
