"""Data models for orderwatch."""

from orderwatch.models.order import OrderSummary
from orderwatch.models.outcome import PollOutcome, PollStatus, SkipReason
from orderwatch.models.session import BackendCredentials, DriverSession

__all__ = [
    "BackendCredentials",
    "DriverSession",
    "OrderSummary",
    "PollOutcome",
    "PollStatus",
    "SkipReason",
]
