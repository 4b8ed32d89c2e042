"""Tests for the ephemeral client cache."""

import json

import pytest

from cosmicpatterns.cache import ClientCache, InMemoryStorageBackend
from cosmicpatterns.errors import CacheQuotaExceededError


class FakeClockMs:
    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock_ms():
    return FakeClockMs()


@pytest.fixture
def backend():
    return InMemoryStorageBackend()


@pytest.fixture
def cache(backend, clock_ms):
    return ClientCache(backend, clock_ms=clock_ms)


class TestKeys:
    def test_make_key(self, cache):
        assert cache.make_key("user-1") == "cosmic-patterns:user-1"
        assert cache.make_key("user-1", "history") == "cosmic-patterns:user-1:history"

    def test_namespace_cannot_contain_separator(self, backend):
        with pytest.raises(ValueError):
            ClientCache(backend, namespace="bad:ns")


class TestGetSet:
    def test_round_trip(self, cache, backend):
        key = cache.make_key("user-1", "current")

        assert cache.set(key, {"life_themes": {"dominant": "Healing"}})

        assert cache.get(key) == {"life_themes": {"dominant": "Healing"}}
        stored = json.loads(backend.get_item(key))
        assert stored["timestamp"] == 1_000_000

    def test_missing(self, cache):
        assert cache.get("cosmic-patterns:nobody") is None

    def test_expiry_evicts(self, cache, backend, clock_ms):
        key = cache.make_key("user-1")
        cache.set(key, [1, 2, 3])

        clock_ms.now += 3_600_000
        assert cache.get(key, max_age_ms=3_600_000) == [1, 2, 3]

        clock_ms.now += 1_000
        assert cache.get(key, max_age_ms=3_600_000) is None
        assert backend.get_item(key) is None

    def test_default_max_age_is_one_hour(self, cache, clock_ms):
        key = cache.make_key("user-1")
        cache.set(key, "data")
        clock_ms.now += 3_601_000

        assert cache.get(key) is None

    @pytest.mark.parametrize(
        "raw",
        ["not json", json.dumps({"data": 1}), json.dumps({"data": 1, "timestamp": "soon"}), "[]"],
    )
    def test_corrupt_entries_are_evicted(self, cache, backend, raw):
        backend.set_item("cosmic-patterns:user-1", raw)

        assert cache.get("cosmic-patterns:user-1") is None
        assert backend.get_item("cosmic-patterns:user-1") is None

    def test_quota_exceeded_write_is_dropped(self, clock_ms):
        backend = InMemoryStorageBackend(quota_bytes=80)
        cache = ClientCache(backend, clock_ms=clock_ms)
        key = cache.make_key("user-1")

        assert cache.set(key, "small")
        assert not cache.set(key, "x" * 200)

        assert cache.get(key) == "small"


class TestClear:
    def test_clear_all_respects_user_prefix(self, backend, clock_ms):
        cache = ClientCache(backend, clock_ms=clock_ms)
        other_namespace = ClientCache(backend, namespace="other", clock_ms=clock_ms)
        cache.set(cache.make_key("user-1"), 1)
        cache.set(cache.make_key("user-1", "history"), 2)
        cache.set(cache.make_key("user-10"), 3)
        other_namespace.set(other_namespace.make_key("user-1"), 4)

        removed = cache.clear_all("user-1")

        assert removed == 2
        assert sorted(backend.keys()) == ["cosmic-patterns:user-10", "other:user-1"]

    def test_clear_all_ignores_user_ids_with_separator(self, cache, backend):
        cache.set(cache.make_key("alice"), 1)
        cache.set(cache.make_key("alice:x"), 2)
        cache.set(cache.make_key("alice:x", "current"), 3)

        removed = cache.clear_all("alice")

        assert removed == 1
        assert cache.get(cache.make_key("alice:x")) == 2
        assert cache.get(cache.make_key("alice:x", "current")) == 3
        assert cache.make_key("alice:x") == "cosmic-patterns:alice%3Ax"
        assert cache.make_key("a%3Ab") != cache.make_key("a:b")

    def test_clear_single_key(self, cache, backend):
        key = cache.make_key("user-1")
        cache.set(key, 1)

        cache.clear(key)

        assert backend.keys() == []


class TestInMemoryStorageBackend:
    def test_quota_error_keeps_previous_value(self):
        backend = InMemoryStorageBackend(quota_bytes=10)
        backend.set_item("k", "v")

        with pytest.raises(CacheQuotaExceededError):
            backend.set_item("k", "way too long")

        assert backend.get_item("k") == "v"
        assert backend.size_bytes == 2
