from __future__ import annotations

import math

from fakes import FakeClock
from hypercave.adapters.cache.session_cache import NEVER, SessionCache


def test_round_trip_finite_and_infinite_ttl():
    clock = FakeClock()
    cache = SessionCache(clock=clock)
    cache.set("a", [1, 2], 5000)
    cache.set("b", {"x": 1}, NEVER)

    clock.advance(4999)
    assert cache.get("a") == [1, 2]
    clock.advance(10 ** 12)
    assert cache.get("b") == {"x": 1}


def test_expired_entry_is_purged_and_stays_absent():
    clock = FakeClock()
    cache = SessionCache(clock=clock)
    cache.set("k", "v", 10)
    clock.advance(11)
    assert cache.get("k") is None
    assert len(cache) == 0
    assert cache.get("k") is None


def test_entry_at_exact_expiry_is_still_served():
    clock = FakeClock()
    cache = SessionCache(clock=clock)
    cache.set("k", "v", 10)
    clock.advance(10)
    assert cache.get("k") == "v"


def test_empty_list_is_a_cached_value():
    cache = SessionCache()
    cache.set("fungibles:acct", [])
    assert cache.get("fungibles:acct") == []


def test_remove_and_clear():
    cache = SessionCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.remove("a")
    cache.remove("missing")
    assert "a" not in cache
    assert "b" in cache
    cache.clear()
    assert len(cache) == 0


def test_default_ttl_is_never():
    assert NEVER == math.inf
    clock = FakeClock()
    cache = SessionCache(clock=clock)
    cache.set("k", "v")
    clock.advance(10 ** 15)
    assert cache.get("k") == "v"
