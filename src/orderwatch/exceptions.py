"""Custom exception hierarchy for orderwatch."""

from __future__ import annotations


class OrderWatchError(Exception):
    """Base exception for all orderwatch errors."""


class OrderWatchConfigError(OrderWatchError):
    """Invalid or missing configuration."""


class OrderWatchStoreError(OrderWatchError):
    """The session key/value store could not be read or written.

    Also raised when a stored value exists but cannot be decoded
    (e.g. a ``driver`` blob that is not a JSON object).
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class OrderWatchTransportError(OrderWatchError):
    """HTTP-level failure (network, timeout, non-2xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class OrderWatchResponseError(OrderWatchTransportError):
    """The backend answered 2xx but the body is not the expected JSON shape."""


class OrderWatchNotificationError(OrderWatchError):
    """The notification sink failed to deliver a notification."""
