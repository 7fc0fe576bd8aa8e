"""orderwatch - background new-order detector for delivery drivers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("orderwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from orderwatch.client import OrderWatchClient
from orderwatch.config import OrderWatchConfig
from orderwatch.detector import NewOrderDetector, select_candidate
from orderwatch.exceptions import (
    OrderWatchConfigError,
    OrderWatchError,
    OrderWatchNotificationError,
    OrderWatchResponseError,
    OrderWatchStoreError,
    OrderWatchTransportError,
)
from orderwatch.models import (
    BackendCredentials,
    DriverSession,
    OrderSummary,
    PollOutcome,
    PollStatus,
    SkipReason,
)
from orderwatch.notifications import (
    CallbackNotificationSink,
    LoggingNotificationSink,
    NotificationChannel,
    NotificationSink,
)
from orderwatch.scheduler import AsyncioTaskHost, BackoffPolicy, OrderPollScheduler, TaskHost
from orderwatch.session import SessionRepository, StoreSessionRepository
from orderwatch.store import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "__version__",
    "AsyncioTaskHost",
    "BackendCredentials",
    "BackoffPolicy",
    "CallbackNotificationSink",
    "DriverSession",
    "JsonFileStore",
    "KeyValueStore",
    "LoggingNotificationSink",
    "MemoryStore",
    "NewOrderDetector",
    "NotificationChannel",
    "NotificationSink",
    "OrderPollScheduler",
    "OrderSummary",
    "OrderWatchClient",
    "OrderWatchConfig",
    "OrderWatchConfigError",
    "OrderWatchError",
    "OrderWatchNotificationError",
    "OrderWatchResponseError",
    "OrderWatchStoreError",
    "OrderWatchTransportError",
    "PollOutcome",
    "PollStatus",
    "SessionRepository",
    "SkipReason",
    "StoreSessionRepository",
    "TaskHost",
    "select_candidate",
]
