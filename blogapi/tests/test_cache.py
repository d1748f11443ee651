"""
Tests for the in-memory TTL cache.
"""

from blogapi.cache import MemoryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestMemoryCache:

    def test_get_set(self):
        cache = MemoryCache()
        cache.set("a", "PT")
        assert cache.get("a") == "PT"
        assert cache.get("missing") is None

    def test_expiry(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("a", "PT", ttl=60)
        clock.now += 59
        assert cache.get("a") == "PT"
        clock.now += 1
        assert cache.get("a") is None
        assert cache.size == 0

    def test_lru_eviction(self):
        """The least recently used entry is evicted first."""
        cache = MemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_clear(self):
        cache = MemoryCache()
        cache.set("a", 1)
        cache.clear()
        assert cache.size == 0
