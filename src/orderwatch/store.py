"""Durable string key/value stores shared with the host application.

The host app owns most keys (driver blob, online flag, credentials); the
detector only writes ``last_notified_order_id``.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from orderwatch.exceptions import OrderWatchStoreError

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural interface of the session store.

    Values are always strings; a missing key reads as ``None``.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """In-process store, for tests and one-off runs."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore:
    """Store backed by a flat JSON object on disk.

    The file is re-read on every ``get`` because the host application may
    change it between polls. Writes go to a temporary file in the same
    directory followed by :func:`os.replace`, so a process killed mid-write
    leaves the previous content intact.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise OrderWatchStoreError(f"Cannot read store {self._path}: {exc}") from exc

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise OrderWatchStoreError(f"Store {self._path} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise OrderWatchStoreError(f"Store {self._path} must contain a JSON object")

        # Non-string values are normalised to the string form the host would have written.
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._write_lock:
            data = self._load()
            data[key] = value
            self._atomic_write(data)
        _logger.debug("Stored key %s in %s", key, self._path)

    def _atomic_write(self, data: dict[str, str]) -> None:
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=directory)
        except OSError as exc:
            raise OrderWatchStoreError(f"Cannot write store {self._path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise OrderWatchStoreError(f"Cannot write store {self._path}: {exc}") from exc
