"""HTTP transport for the backend REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from orderwatch._constants import USER_AGENT
from orderwatch._redact import redact_for_log
from orderwatch.config import OrderWatchConfig
from orderwatch.exceptions import OrderWatchResponseError, OrderWatchTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> Any:
        ...


class HttpTransport:
    """aiohttp-backed transport with a bounded per-request timeout."""

    def __init__(self, config: OrderWatchConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(
            total=config.request_timeout,
            connect=config.connect_timeout,
        )

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises
        ------
        OrderWatchTransportError
            On connection failures, timeouts and non-2xx statuses.
        OrderWatchResponseError
            When a 2xx body cannot be decoded as text or is not valid JSON.
        """
        request_headers = {"user-agent": USER_AGENT, **headers}

        _logger.debug("GET %s params=%s", url, params)
        if self._config.api_trace_enabled:
            _logger.debug("GET %s headers=%s", url, redact_for_log(request_headers))

        try:
            async with self._http.get(url, params=params, headers=request_headers, timeout=self._timeout) as resp:
                ok = 200 <= resp.status < 300
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    error_cls = OrderWatchResponseError if ok else OrderWatchTransportError
                    raise error_cls(
                        f"Undecodable body (HTTP {resp.status}) from {url}: {exc.reason}",
                        status_code=resp.status,
                        endpoint=url,
                    ) from exc
                if not ok:
                    raise OrderWatchTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except OrderWatchTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise OrderWatchTransportError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise OrderWatchTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise OrderWatchResponseError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=resp.status,
                endpoint=url,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("GET %s response=%s", url, redact_for_log(body))
        return body
