from __future__ import annotations

import json

from fakes import FakeClock
from hypercave.adapters.cache.durable_cache import DurableCache
from hypercave.adapters.cache.session_cache import NEVER


def test_round_trip_survives_new_instance(tmp_path):
    path = tmp_path / "cache.json"
    clock = FakeClock()
    DurableCache(path, clock=clock).set("resource:abc", {"symbol": "XRD"}, NEVER)

    reopened = DurableCache(path, clock=clock)
    assert reopened.get("resource:abc") == {"symbol": "XRD"}


def test_infinite_ttl_is_stored_as_null_expiry(tmp_path):
    path = tmp_path / "cache.json"
    clock = FakeClock(500.0)
    cache = DurableCache(path, clock=clock)
    cache.set("forever", 1)
    cache.set("soon", 2, 100)

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["hypercave_forever"] == {"value": 1, "expiry": None}
    assert on_disk["hypercave_soon"] == {"value": 2, "expiry": 600.0}


def test_expired_entry_is_purged_from_disk(tmp_path):
    path = tmp_path / "cache.json"
    clock = FakeClock()
    cache = DurableCache(path, clock=clock)
    cache.set("k", "v", 10)
    clock.advance(11)

    assert cache.get("k") is None
    assert cache.get("k") is None
    assert "hypercave_k" not in json.loads(path.read_text(encoding="utf-8"))


def test_clear_all_only_touches_own_prefix(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"other_app": {"value": 1, "expiry": None}}), encoding="utf-8")
    cache = DurableCache(path)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear_all()

    assert cache.get("a") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"other_app": {"value": 1, "expiry": None}}


def test_corrupt_file_reads_as_miss(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = DurableCache(path)
    assert cache.get("anything") is None

    cache.set("k", "v")
    assert DurableCache(path).get("k") == "v"


def test_non_numeric_expiry_reads_as_miss_and_is_dropped(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps({"hypercave_resource:x": {"value": {"symbol": "X"}, "expiry": "soon"}}),
        encoding="utf-8",
    )

    assert DurableCache(path).get("resource:x") is None
    assert "hypercave_resource:x" not in json.loads(path.read_text(encoding="utf-8"))


def test_unserialisable_value_is_absorbed(tmp_path):
    path = tmp_path / "cache.json"
    cache = DurableCache(path)
    cache.set("good", 1)

    cache.set("bad", object())
    cache.set("nan", float("nan"))

    assert cache.get("bad") is None
    assert cache.get("nan") is None
    assert DurableCache(path).get("good") == 1


def test_unwritable_location_is_absorbed(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cache = DurableCache(blocker / "cache.json")

    cache.set("k", "v")

    assert cache.get("k") is None


def test_remove_missing_key_is_noop(tmp_path):
    cache = DurableCache(tmp_path / "cache.json")
    cache.remove("missing")
    assert not (tmp_path / "cache.json").exists()
