"""High-level async entry point wiring store, transport, detector and scheduler."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from orderwatch._transport import HttpTransport, Transport
from orderwatch.config import OrderWatchConfig
from orderwatch.detector import NewOrderDetector
from orderwatch.exceptions import OrderWatchError
from orderwatch.models.outcome import PollOutcome
from orderwatch.notifications import LoggingNotificationSink, NotificationSink
from orderwatch.scheduler import AsyncioTaskHost, BackoffPolicy, OrderPollScheduler, TaskHost
from orderwatch.session import SessionRepository, StoreSessionRepository
from orderwatch.store import JsonFileStore, KeyValueStore

_logger = logging.getLogger(__name__)


class OrderWatchClient:
    """Owns the HTTP session and builds the detector and scheduler.

    Usage::

        async with OrderWatchClient(config) as client:
            outcome = await client.poll()
    """

    def __init__(
        self,
        config: OrderWatchConfig,
        *,
        store: KeyValueStore | None = None,
        sink: NotificationSink | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._store: KeyValueStore = store if store is not None else JsonFileStore(config.store_path)
        self._repository: SessionRepository = StoreSessionRepository(self._store)
        self._sink: NotificationSink = sink if sink is not None else LoggingNotificationSink()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._external_transport = transport is not None
        self._detector: NewOrderDetector | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> OrderWatchClient:
        if not self._external_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._detector = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> OrderWatchConfig:
        return self._config

    @property
    def repository(self) -> SessionRepository:
        return self._repository

    @property
    def detector(self) -> NewOrderDetector:
        if self._detector is None:
            if self._transport is None:
                raise OrderWatchError("Client not initialized. Use 'async with OrderWatchClient(...) as client:'")
            self._detector = NewOrderDetector(self._config, self._repository, self._transport, self._sink)
        return self._detector

    async def poll(self) -> PollOutcome:
        """Run a single detection pass."""
        return await self.detector.poll()

    def scheduler(self, host: TaskHost | None = None) -> OrderPollScheduler:
        """Build a scheduler that polls through this client.

        Without *host*, an :class:`AsyncioTaskHost` with the configured
        backoff is created.
        """
        if host is None:
            host = AsyncioTaskHost(BackoffPolicy.from_config(self._config))
        return OrderPollScheduler(host, self.poll, self._config)
