"""Command-line entry point.

Commands:
  - ``orderwatch poll``: run one detection pass and print the outcome
  - ``orderwatch run``: start the scheduler and poll until interrupted
  - ``orderwatch show-state``: print what the detector would read from the store
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from typing import Any

from orderwatch._redact import redact_for_log
from orderwatch.client import OrderWatchClient
from orderwatch.config import OrderWatchConfig
from orderwatch.exceptions import OrderWatchConfigError, OrderWatchError
from orderwatch.scheduler import AsyncioTaskHost, BackoffPolicy, OrderPollScheduler
from orderwatch.session import StoreSessionRepository
from orderwatch.store import JsonFileStore

_logger = logging.getLogger("orderwatch.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orderwatch", description="Poll the backend for new pending orders.")
    parser.add_argument("--store", help="Path of the JSON session store (env: ORDERWATCH_STORE_PATH)")
    parser.add_argument("--locale", help="Notification language, 'en' or 'es' (env: ORDERWATCH_LOCALE)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("poll", help="Run a single poll")
    sub.add_parser("run", help="Start the poll scheduler and keep running")
    sub.add_parser("show-state", help="Print the stored session (secrets redacted)")
    return parser


def _load_config(args: argparse.Namespace) -> OrderWatchConfig:
    overrides: dict[str, Any] = {}
    if args.store:
        overrides["store_path"] = args.store
    if args.locale:
        overrides["locale"] = args.locale
    return OrderWatchConfig.from_env(**overrides)


async def _cmd_poll(config: OrderWatchConfig) -> int:
    async with OrderWatchClient(config) as client:
        outcome = await client.poll()
    print(outcome)
    return 1 if outcome.should_retry else 0


async def _cmd_run(config: OrderWatchConfig) -> int:
    host = AsyncioTaskHost(BackoffPolicy.from_config(config))
    async with OrderWatchClient(config) as client:
        scheduler = OrderPollScheduler(host, client.poll, config)
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await host.aclose()
    return 0


def _cmd_show_state(config: OrderWatchConfig) -> int:
    repository = StoreSessionRepository(JsonFileStore(config.store_path))
    driver = repository.load_driver_session()
    credentials = repository.load_credentials()
    state = {
        "store_path": config.store_path,
        "driver": driver.model_dump() if driver else None,
        "credentials": (
            {"base_url": credentials.base_url, "api_key": credentials.api_key} if credentials else None
        ),
        "last_notified_order_id": repository.load_marker(),
    }
    print(json.dumps(redact_for_log(state), indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    try:
        config = _load_config(args)
        if args.command == "poll":
            return asyncio.run(_cmd_poll(config))
        if args.command == "run":
            with contextlib.suppress(KeyboardInterrupt):
                asyncio.run(_cmd_run(config))
            _logger.info("Stopped by user.")
            return 0
        return _cmd_show_state(config)
    except OrderWatchConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2
    except OrderWatchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
