"""Driver session and backend credential snapshots."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from orderwatch.normalize import safe_str


class DriverSession(BaseModel):
    """Immutable view of the logged-in driver, loaded fresh for every poll.

    Parameters
    ----------
    driver_id : str
        Driver identifier (``id`` in the stored blob). Empty when missing.
    company_id : str
        Company the driver works for (``companyId`` or ``company_id``).
        Empty when missing.
    is_online : bool
        Whether the driver is accepting orders.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    driver_id: str = Field(default="", validation_alias=AliasChoices("driver_id", "id", "driverId"))
    company_id: str = Field(default="", validation_alias=AliasChoices("company_id", "companyId"))
    is_online: bool = False

    @field_validator("driver_id", "company_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return safe_str(value) or ""

    @property
    def has_identity(self) -> bool:
        return bool(self.driver_id) and bool(self.company_id)

    @property
    def can_poll(self) -> bool:
        """Only an online driver with both ids may trigger a backend query."""
        return self.is_online and self.has_identity


class BackendCredentials(BaseModel):
    """Backend location and API key.

    Parameters
    ----------
    base_url : str
        Project URL, without trailing slash.
    api_key : str
        Key sent both as ``apikey`` and as a bearer token.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    base_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.rstrip("/")
        if not stripped:
            raise ValueError("base_url must be non-empty")
        return stripped
