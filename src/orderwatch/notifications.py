"""Notification sinks.

The detector only needs ``notify(title, body)``. Hosts that can show real
notifications implement :class:`NotificationSink` and honour the
:class:`NotificationChannel` settings; :class:`LoggingNotificationSink`
is the default when no host is available.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from orderwatch._constants import CHANNEL_ID, NOTIFICATION_ID, VIBRATION_PATTERN_MS
from orderwatch.exceptions import OrderWatchNotificationError

_logger = logging.getLogger(__name__)


class Importance(enum.IntEnum):
    LOW = 2
    DEFAULT = 3
    HIGH = 4


@dataclasses.dataclass(frozen=True)
class NotificationChannel:
    """The single channel new-order notifications are posted to.

    ``notification_id`` is fixed, so a newer notification replaces the
    previous one instead of stacking.
    """

    channel_id: str = CHANNEL_ID
    name: str = "New orders"
    description: str = "Notifications for newly available orders"
    importance: int = Importance.HIGH
    vibration_pattern_ms: tuple[int, ...] = VIBRATION_PATTERN_MS
    enable_lights: bool = True
    auto_cancel: bool = True
    notification_id: int = NOTIFICATION_ID


NEW_ORDERS_CHANNEL = NotificationChannel()


class NotificationSink(Protocol):
    async def notify(self, title: str, body: str) -> None:
        ...


class LoggingNotificationSink:
    """Writes notifications to the log."""

    def __init__(self, channel: NotificationChannel = NEW_ORDERS_CHANNEL, *, level: int = logging.INFO) -> None:
        self._channel = channel
        self._level = level

    async def notify(self, title: str, body: str) -> None:
        _logger.log(
            self._level,
            "[%s #%d] %s | %s",
            self._channel.channel_id,
            self._channel.notification_id,
            title,
            body.replace("\n", " | "),
        )


class CallbackNotificationSink:
    """Adapts an async callable (e.g. a platform bridge) to :class:`NotificationSink`.

    Any exception raised by the callable is wrapped in
    :class:`OrderWatchNotificationError`.
    """

    def __init__(
        self,
        callback: Callable[[NotificationChannel, str, str], Awaitable[None]],
        channel: NotificationChannel = NEW_ORDERS_CHANNEL,
    ) -> None:
        self._callback = callback
        self._channel = channel

    async def notify(self, title: str, body: str) -> None:
        try:
            await self._callback(self._channel, title, body)
        except OrderWatchNotificationError:
            raise
        except Exception as exc:
            raise OrderWatchNotificationError(f"Notification delivery failed: {exc}") from exc
