from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


NEVER = math.inf


def wall_clock_ms() -> float:
    return time.time() * 1000.0


@dataclass
class CacheEntry:
    value: Any
    expiry: float = NEVER

    def expired(self, now_ms: float) -> bool:
        return self.expiry != NEVER and now_ms > self.expiry


class SessionCache:
    """
    In-memory cache scoped to one connected account.

    Cleared in full when the active account changes or the wallet disconnects.
    """

    def __init__(self, clock: Callable[[], float] = wall_clock_ms):
        self._clock = clock
        self._data: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._data[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_ms: float = NEVER) -> None:
        self._data[key] = CacheEntry(value=value, expiry=self._clock() + ttl_ms)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._data)
