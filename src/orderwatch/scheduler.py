"""Poll scheduling.

:class:`OrderPollScheduler` decides *when* polls are requested: one right
away, a burst at short delays after start, then a recurring poll. Running
them, and retrying transient failures with exponential backoff, is the job
of a :class:`TaskHost`. :class:`AsyncioTaskHost` is the in-process host.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Protocol

from orderwatch._constants import PERIODIC_WORK_NAME
from orderwatch.config import OrderWatchConfig
from orderwatch.models.outcome import PollOutcome

_logger = logging.getLogger(__name__)

PollJob = Callable[[], Awaitable[PollOutcome]]


@dataclasses.dataclass(frozen=True)
class BackoffPolicy:
    """Exponential retry delays: ``initial * multiplier ** (attempt - 1)``, capped at ``maximum``.

    Parameters
    ----------
    initial : float
        Delay before the first retry, in seconds.
    multiplier : float
        Growth factor between consecutive retries.
    maximum : float
        Upper bound for any single delay.
    max_attempts : int or None
        Total attempts (first run included) before giving up.
        ``None`` retries indefinitely.
    """

    initial: float = 30.0
    multiplier: float = 2.0
    maximum: float = 5 * 3600.0
    max_attempts: int | None = None

    @classmethod
    def from_config(cls, config: OrderWatchConfig) -> BackoffPolicy:
        return cls(
            initial=config.backoff_initial,
            maximum=config.backoff_max,
            max_attempts=config.backoff_max_attempts,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt number *attempt* (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        # Avoid float overflow for very long failure streaks.
        exponent = min(attempt - 1, 64)
        return min(self.maximum, self.initial * self.multiplier**exponent)

    def exhausted(self, attempt: int) -> bool:
        return self.max_attempts is not None and attempt >= self.max_attempts


class TaskHost(Protocol):
    """Platform scheduler the poll scheduler enqueues work on.

    Execution times are best effort: a host may delay or coalesce runs.
    """

    def enqueue_once(self, job: PollJob, *, delay: float = 0.0, tag: str = "") -> None:
        ...

    def enqueue_unique_periodic(
        self,
        name: str,
        job: PollJob,
        *,
        interval: float,
        initial_delay: float = 0.0,
    ) -> None:
        """Register a recurring job; an existing job with the same *name* is replaced."""
        ...

    def cancel_all(self) -> None:
        ...


class AsyncioTaskHost:
    """Runs jobs as tasks on the current event loop.

    A job whose outcome asks for a retry (or that raises) is run again after
    the backoff delay, until it succeeds, the policy gives up, or the task is
    cancelled. Each periodic tick runs in its own task, so retries never
    shift the periodic cadence.
    """

    def __init__(self, backoff: BackoffPolicy | None = None) -> None:
        self._backoff = backoff or BackoffPolicy()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._ticks: set[asyncio.Task[Any]] = set()
        self._periodic: dict[str, asyncio.Task[None]] = {}

    @property
    def pending(self) -> int:
        """Number of unfinished runs, one-shot runs and periodic ticks alike."""
        return sum(1 for task in (*self._tasks, *self._ticks) if not task.done())

    @property
    def periodic_names(self) -> list[str]:
        return sorted(name for name, task in self._periodic.items() if not task.done())

    def _spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str,
        *,
        into: set[asyncio.Task[Any]] | None = None,
    ) -> asyncio.Task[Any]:
        tasks = self._tasks if into is None else into
        task = asyncio.get_running_loop().create_task(coro, name=name)
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        return task

    def enqueue_once(self, job: PollJob, *, delay: float = 0.0, tag: str = "") -> None:
        label = tag or f"once+{delay:g}s"
        self._spawn(self._run_once(job, delay, label), name=f"orderwatch:{label}")
        _logger.debug("Enqueued poll %s", label)

    def enqueue_unique_periodic(
        self,
        name: str,
        job: PollJob,
        *,
        interval: float,
        initial_delay: float = 0.0,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        previous = self._periodic.pop(name, None)
        if previous is not None and not previous.done():
            previous.cancel()
            _logger.debug("Replaced periodic job %s", name)

        loop = asyncio.get_running_loop()
        self._periodic[name] = loop.create_task(
            self._run_periodic(name, job, interval, initial_delay),
            name=f"orderwatch:periodic:{name}",
        )
        _logger.info("Scheduled periodic job %s every %gs (first in %gs)", name, interval, initial_delay)

    def cancel_all(self) -> None:
        for task in self._periodic.values():
            task.cancel()
        self._periodic.clear()
        for task in [*self._tasks, *self._ticks]:
            task.cancel()

    async def join(self) -> None:
        """Wait until every one-shot run has finished.

        Periodic loops and their ticks are tracked apart and never awaited
        here, so a live periodic schedule cannot keep this call waiting.
        """
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel everything and wait for the cancellations to settle."""
        tasks = [*self._tasks, *self._ticks, *self._periodic.values()]
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_once(self, job: PollJob, delay: float, label: str) -> PollOutcome | None:
        if delay > 0:
            await asyncio.sleep(delay)
        return await self._run_with_retry(job, label)

    async def _run_periodic(self, name: str, job: PollJob, interval: float, initial_delay: float) -> None:
        if initial_delay > 0:
            await asyncio.sleep(initial_delay)
        tick = 0
        while True:
            tick += 1
            self._spawn(
                self._run_with_retry(job, f"{name}#{tick}"),
                name=f"orderwatch:{name}#{tick}",
                into=self._ticks,
            )
            await asyncio.sleep(interval)

    async def _run_with_retry(self, job: PollJob, label: str) -> PollOutcome | None:
        attempt = 0
        while True:
            attempt += 1
            outcome: PollOutcome | None
            try:
                outcome = await job()
            except asyncio.CancelledError:
                raise
            except Exception:
                _logger.exception("Poll %s raised (attempt %d)", label, attempt)
                outcome = None
            else:
                if not outcome.should_retry:
                    _logger.debug("Poll %s attempt %d: %s", label, attempt, outcome)
                    return outcome

            if self._backoff.exhausted(attempt):
                _logger.warning("Poll %s giving up after %d attempts", label, attempt)
                return outcome

            delay = self._backoff.delay_for(attempt)
            _logger.warning(
                "Poll %s failed (attempt %d), retrying in %.1fs",
                label,
                attempt,
                delay,
            )
            await asyncio.sleep(delay)


class OrderPollScheduler:
    """Requests polls on the start-up cadence.

    Usage::

        scheduler = OrderPollScheduler(host, detector.poll, config)
        scheduler.start()
    """

    def __init__(self, host: TaskHost, job: PollJob, config: OrderWatchConfig | None = None) -> None:
        self._host = host
        self._job = job
        self._config = config or OrderWatchConfig()

    def start(self) -> None:
        """Enqueue the immediate poll, the start-up burst and the recurring poll.

        Safe to call again after a restart: the recurring poll is an upsert,
        so at most one stays active.
        """
        config = self._config
        self._host.enqueue_once(self._job, delay=0.0, tag="immediate")
        for delay in config.burst_delays:
            self._host.enqueue_once(self._job, delay=delay, tag=f"burst+{delay:g}s")
        self._host.enqueue_unique_periodic(
            PERIODIC_WORK_NAME,
            self._job,
            interval=config.periodic_interval,
            initial_delay=config.periodic_initial_delay,
        )
        _logger.info(
            "Order polling started: immediate + %d burst polls, then every %gs",
            len(config.burst_delays),
            config.periodic_interval,
        )

    def stop(self) -> None:
        self._host.cancel_all()
