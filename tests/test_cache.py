"""Tests for the response cache and club-scoped invalidation"""
from unittest.mock import patch

from clubflow.core.cache import MemoryCache
from clubflow.core.cache_invalidation import (
    cache_key, dependent_keys, get_sync_state, invalidate_all_data,
    invalidate_cross_entity_data, invalidate_entity_data, sync_versions,
)


class TestMemoryCache:
    def test_set_and_get(self):
        cache = MemoryCache()
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None

    def test_expired_entry_is_dropped(self):
        cache = MemoryCache(default_ttl=10)
        with patch("clubflow.core.cache.time.monotonic", return_value=100.0):
            cache.set("a", 1)
        with patch("clubflow.core.cache.time.monotonic", return_value=111.0):
            assert cache.get("a") is None
            assert cache.stats()["size"] == 0

    def test_get_or_set_calls_factory_once(self):
        cache = MemoryCache()
        calls = []

        def factory():
            calls.append(1)
            return {"value": 42}

        assert cache.get_or_set("k", factory) == {"value": 42}
        assert cache.get_or_set("k", factory) == {"value": 42}
        assert len(calls) == 1

    def test_delete_prefix(self):
        cache = MemoryCache()
        cache.set("clubs:1:stats:u1", 1)
        cache.set("clubs:1:stats:u2", 2)
        cache.set("clubs:2:stats:u1", 3)
        assert cache.delete_prefix("clubs:1:stats:") == 2
        assert cache.get("clubs:2:stats:u1") == 3

    def test_max_size_evicts_oldest_expiry(self):
        cache = MemoryCache(max_size=2)
        cache.set("short", 1, ttl=1)
        cache.set("long", 2, ttl=100)
        cache.set("new", 3)
        assert cache.get("short") is None
        assert cache.get("long") == 2
        assert cache.get("new") == 3

    def test_cleanup_counts_removed(self):
        cache = MemoryCache()
        with patch("clubflow.core.cache.time.monotonic", return_value=0.0):
            cache.set("a", 1, ttl=5)
            cache.set("b", 2, ttl=50)
        with patch("clubflow.core.cache.time.monotonic", return_value=10.0):
            assert cache.cleanup() == 1


class TestInvalidation:
    def test_dependent_keys(self):
        assert dependent_keys("members") == ["members", "dashboard"]
        assert dependent_keys("messages") == ["messages", "communication-stats", "notifications"]
        assert dependent_keys("facilities") == ["facilities"]

    def test_entity_change_drops_dashboard(self):
        cache = MemoryCache()
        cache.set(cache_key(1, "dashboard"), "stats")
        cache.set(cache_key(2, "dashboard"), "other club")
        invalidate_entity_data(cache, 1, "bookings")
        assert cache.get(cache_key(1, "dashboard")) is None
        assert cache.get(cache_key(2, "dashboard")) == "other club"

    def test_per_user_keys_are_dropped(self):
        cache = MemoryCache()
        cache.set(f"{cache_key(1, 'communication-stats')}:user-1", "stats")
        invalidate_entity_data(cache, 1, "announcements")
        assert cache.get(f"{cache_key(1, 'communication-stats')}:user-1") is None

    def test_cross_entity_deduplicates(self):
        cache = MemoryCache()
        dropped = invalidate_cross_entity_data(cache, 1, ["bookings", "events"])
        assert dropped == ["bookings", "dashboard", "events"]

    def test_versions_bump(self):
        cache = MemoryCache()
        invalidate_all_data(cache, 5)
        invalidate_all_data(cache, 5)
        state = get_sync_state(5)
        assert state["versions"]["dashboard"] == 2
        assert state["versions"]["notifications"] == 2
        assert "critical" in state["sync_intervals"]
        assert sync_versions.get(6) == {}
