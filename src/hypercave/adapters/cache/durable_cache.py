"""
durable_cache.py - JSON-file cache that survives process restarts

Entries are stored under ``prefix + key`` as ``{"value": ..., "expiry": ms|null}``
(null = never expires). Other keys in the same file are left untouched, so
several prefixes can share one document.

Failure policy:
- write failures (disk, permissions, non-serialisable values) are logged and
  absorbed; the entry is simply not cached
- unreadable or corrupt storage reads as empty
"""

from __future__ import annotations

import json
import math
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from loguru import logger

from ...domain.errors import CacheWriteError
from .session_cache import NEVER, wall_clock_ms


DEFAULT_PREFIX = "hypercave_"


class DurableCache:
    def __init__(
        self,
        path: Union[str, Path],
        prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], float] = wall_clock_ms,
    ):
        self.path = Path(path)
        self.prefix = prefix
        self._clock = clock
        self._store: Optional[Dict[str, Dict[str, Any]]] = None

    # ------------------------------------------------------------------ #
    # Public API                                                        #
    # ------------------------------------------------------------------ #
    def get(self, key: str) -> Optional[Any]:
        store = self._load()
        item = store.get(self.prefix + key)
        if not isinstance(item, dict) or "value" not in item:
            return None

        expiry = item.get("expiry")
        try:
            expired = expiry is not None and self._clock() > float(expiry)
        except (TypeError, ValueError):
            logger.warning(f"DURABLE_CACHE | bad_expiry | key={key} | expiry={expiry!r}")
            expired = True
        if expired:
            self.remove(key)
            return None
        return item["value"]

    def set(self, key: str, value: Any, ttl_ms: float = NEVER) -> None:
        store = self._load()
        full_key = self.prefix + key
        previous = store.get(full_key)
        expiry = None if math.isinf(ttl_ms) else self._clock() + ttl_ms
        store[full_key] = {"value": value, "expiry": expiry}
        try:
            self._flush(store)
        except CacheWriteError as exc:
            logger.warning(f"DURABLE_CACHE | write_failed | key={key} | {exc}")
            if previous is None:
                store.pop(full_key, None)
            else:
                store[full_key] = previous

    def remove(self, key: str) -> None:
        store = self._load()
        if store.pop(self.prefix + key, None) is None:
            return
        try:
            self._flush(store)
        except CacheWriteError as exc:
            logger.warning(f"DURABLE_CACHE | remove_failed | key={key} | {exc}")

    def clear_all(self) -> None:
        store = self._load()
        ours = [k for k in store if k.startswith(self.prefix)]
        for k in ours:
            del store[k]
        try:
            self._flush(store)
        except CacheWriteError as exc:
            logger.warning(f"DURABLE_CACHE | clear_failed | {exc}")
        logger.info(f"DURABLE_CACHE | cleared | entries={len(ours)}")

    # ------------------------------------------------------------------ #
    # Storage                                                           #
    # ------------------------------------------------------------------ #
    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._store is not None:
            return self._store
        self._store = {}
        if not self.path.exists():
            return self._store
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"DURABLE_CACHE | unreadable | path={self.path} | {exc}")
            return self._store
        if isinstance(data, dict):
            self._store = data
        return self._store

    def _flush(self, store: Dict[str, Dict[str, Any]]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            payload = json.dumps(store, allow_nan=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise CacheWriteError(str(exc)) from exc
