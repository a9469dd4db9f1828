"""
Unit tests for the TTL cache.
"""
import pytest

from habitflow.utils.cache import CacheKeys, TTLCache, invalidate_user_cache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(max_size=3, default_ttl=60, clock=clock)


class TestTTLCache:
    def test_set_and_get(self, cache):
        cache.set("a", {"value": 1})
        assert cache.get("a") == {"value": 1}
        assert cache.has("a")

    def test_missing_key_returns_default(self, cache):
        assert cache.get("missing") is None
        assert cache.get("missing", "fallback") == "fallback"

    def test_expired_entry_is_never_returned(self, cache, clock):
        cache.set("a", 1)
        clock.advance(59)
        assert cache.get("a") == 1
        clock.advance(1)
        assert cache.get("a") is None
        assert not cache.has("a")
        assert cache.size() == 0

    def test_per_entry_ttl(self, cache, clock):
        cache.set("short", 1, ttl=5)
        cache.set("long", 2)
        clock.advance(10)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_oldest_entry_evicted_when_full(self, cache):
        for key in ("a", "b", "c", "d"):
            cache.set(key, key)
        assert cache.size() == 3
        assert cache.get("a") is None
        assert cache.get("d") == "d"

    def test_overwrite_does_not_evict(self, cache):
        for key in ("a", "b", "c"):
            cache.set(key, key)
        cache.set("a", "again")
        assert cache.size() == 3
        assert cache.get("b") == "b"
        assert cache.get("a") == "again"

    def test_none_is_a_cacheable_value(self, cache):
        cache.set("a", None)
        assert cache.has("a")
        assert cache.get("a", "fallback") is None

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert cache.size() == 0

    def test_stats(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        assert cache.stats() == {"size": 1, "max_size": 3, "hits": 1, "misses": 1}

    def test_get_or_set_computes_once(self, cache):
        calls = []

        def factory():
            calls.append(1)
            return "built"

        assert cache.get_or_set("k", factory) == "built"
        assert cache.get_or_set("k", factory) == "built"
        assert len(calls) == 1


def test_invalidate_user_cache(clock):
    cache = TTLCache(max_size=10, default_ttl=60, clock=clock)
    cache.set(CacheKeys.habit_summary(1, "2025-01-05"), "mine")
    cache.set(CacheKeys.habit_summary(11, "2025-01-05"), "other")
    cache.set(CacheKeys.leaderboard(10), ["board"])
    cache.set(CacheKeys.SHOP_CATALOG, ["items"])

    invalidate_user_cache(cache, 1)

    assert not cache.has(CacheKeys.habit_summary(1, "2025-01-05"))
    assert cache.has(CacheKeys.habit_summary(11, "2025-01-05"))
    assert not cache.has(CacheKeys.leaderboard(10))
    assert cache.has(CacheKeys.SHOP_CATALOG)
