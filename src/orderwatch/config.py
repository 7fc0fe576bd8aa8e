"""Configuration for orderwatch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from orderwatch._constants import (
    BACKOFF_INITIAL_S,
    BACKOFF_MAX_S,
    BURST_DELAYS_S,
    DEFAULT_FETCH_LIMIT,
    ORDER_STATUS_PENDING,
    PERIODIC_INITIAL_DELAY_S,
    PERIODIC_INTERVAL_S,
)
from orderwatch.exceptions import OrderWatchConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise OrderWatchConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise OrderWatchConfigError(f"{name} must be an integer, got {value!r}") from exc


def _env_delays(name: str, value: str) -> tuple[float, ...]:
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(_env_float(name, part) for part in parts)


@dataclasses.dataclass(frozen=True)
class OrderWatchConfig:
    """Detector and scheduler configuration.

    Parameters
    ----------
    store_path : str
        Path of the JSON key/value file shared with the host application.
    fetch_limit : int
        How many of the most recent pending orders one poll looks at.
    order_status : str
        Backend status value that marks an order as pending.
    request_timeout : float
        Total seconds allowed for the orders request.
    connect_timeout : float
        Seconds allowed to establish the connection.
    periodic_interval : float
        Seconds between recurring polls.
    periodic_initial_delay : float
        Seconds before the first recurring poll.
    burst_delays : tuple of float
        Delays (seconds after start) of the one-shot polls enqueued on start.
    backoff_initial : float
        First retry delay after a transient failure.
    backoff_max : float
        Upper bound on the retry delay.
    backoff_max_attempts : int or None
        Give up retrying a job after this many attempts. ``None`` retries
        until the job succeeds or is cancelled.
    locale : str
        Language of notification text (``"en"`` or ``"es"``).
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    store_path: str = "orderwatch-store.json"
    fetch_limit: int = DEFAULT_FETCH_LIMIT
    order_status: str = ORDER_STATUS_PENDING
    request_timeout: float = 10.0
    connect_timeout: float = 5.0
    periodic_interval: float = PERIODIC_INTERVAL_S
    periodic_initial_delay: float = PERIODIC_INITIAL_DELAY_S
    burst_delays: tuple[float, ...] = BURST_DELAYS_S
    backoff_initial: float = BACKOFF_INITIAL_S
    backoff_max: float = BACKOFF_MAX_S
    backoff_max_attempts: int | None = None
    locale: str = "en"
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if self.fetch_limit < 1:
            raise OrderWatchConfigError(f"fetch_limit must be >= 1, got {self.fetch_limit}")
        if self.request_timeout <= 0 or self.connect_timeout <= 0:
            raise OrderWatchConfigError("timeouts must be positive")
        if self.periodic_interval <= 0:
            raise OrderWatchConfigError(f"periodic_interval must be positive, got {self.periodic_interval}")
        if any(delay < 0 for delay in self.burst_delays):
            raise OrderWatchConfigError("burst_delays must not be negative")
        if self.backoff_initial <= 0 or self.backoff_max < self.backoff_initial:
            raise OrderWatchConfigError("backoff_initial must be positive and not exceed backoff_max")
        if self.backoff_max_attempts is not None and self.backoff_max_attempts < 1:
            raise OrderWatchConfigError(
                f"backoff_max_attempts must be >= 1 or unset, got {self.backoff_max_attempts}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> OrderWatchConfig:
        """Create configuration from ``ORDERWATCH_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        OrderWatchConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "ORDERWATCH_STORE_PATH": "store_path",
            "ORDERWATCH_ORDER_STATUS": "order_status",
            "ORDERWATCH_LOCALE": "locale",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "ORDERWATCH_REQUEST_TIMEOUT": "request_timeout",
            "ORDERWATCH_CONNECT_TIMEOUT": "connect_timeout",
            "ORDERWATCH_PERIODIC_INTERVAL": "periodic_interval",
            "ORDERWATCH_PERIODIC_INITIAL_DELAY": "periodic_initial_delay",
            "ORDERWATCH_BACKOFF_INITIAL": "backoff_initial",
            "ORDERWATCH_BACKOFF_MAX": "backoff_max",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        limit_env = env.get("ORDERWATCH_FETCH_LIMIT")
        if limit_env is not None and "fetch_limit" not in overrides:
            config_kwargs["fetch_limit"] = _env_int("ORDERWATCH_FETCH_LIMIT", limit_env)

        attempts_env = env.get("ORDERWATCH_BACKOFF_MAX_ATTEMPTS")
        if attempts_env is not None and "backoff_max_attempts" not in overrides:
            config_kwargs["backoff_max_attempts"] = _env_int("ORDERWATCH_BACKOFF_MAX_ATTEMPTS", attempts_env)

        delays_env = env.get("ORDERWATCH_BURST_DELAYS")
        if delays_env is not None and "burst_delays" not in overrides:
            config_kwargs["burst_delays"] = _env_delays("ORDERWATCH_BURST_DELAYS", delays_env)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("ORDERWATCH_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
