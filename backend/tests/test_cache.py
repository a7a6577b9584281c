"""
Tests for the response cache
"""
import pytest
from cryptotracker.services.market.cache import ResponseCache


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


class TestResponseCache:
    """Tests for get/set/clear and TTL expiry"""

    def test_miss_returns_none(self):
        cache = ResponseCache()
        assert cache.get("listings:10") is None

    def test_set_then_get(self):
        cache = ResponseCache()
        cache.set("listings:10", {"data": [1, 2]})
        assert cache.get("listings:10") == {"data": [1, 2]}
        assert "listings:10" in cache
        assert len(cache) == 1

    def test_entry_expires_after_ttl(self, clock):
        cache = ResponseCache(ttl_seconds=3600, timer=clock)
        cache.set("quotes:BTC", {"price": 1})

        clock.advance(3599)
        assert cache.get("quotes:BTC") == {"price": 1}

        clock.advance(2)
        assert cache.get("quotes:BTC") is None
        assert len(cache) == 0

    def test_overwrite_restarts_ttl(self, clock):
        cache = ResponseCache(ttl_seconds=100, timer=clock)
        cache.set("info:BTC", {"v": 1})
        clock.advance(90)
        cache.set("info:BTC", {"v": 2})
        clock.advance(90)

        assert cache.get("info:BTC") == {"v": 2}

    def test_clear_evicts_everything(self):
        cache = ResponseCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert cache.get("a") is None
        assert cache.get("b") is None
        assert len(cache) == 0

    def test_size_is_bounded(self):
        cache = ResponseCache(max_entries=3)
        for i in range(10):
            cache.set(f"listings:{i}", {"i": i})

        assert len(cache) == 3
        # Most recent entries survive
        assert cache.get("listings:9") == {"i": 9}
        assert cache.get("listings:0") is None

    def test_stats_counts_hits_and_misses(self):
        cache = ResponseCache(ttl_seconds=60, max_entries=8)
        cache.get("x")
        cache.set("x", [1])
        cache.get("x")
        cache.get("x")

        stats = cache.stats()
        assert stats == {"size": 1, "max_entries": 8, "ttl_seconds": 60, "hits": 2, "misses": 1}

    def test_none_cannot_be_cached(self):
        cache = ResponseCache()
        with pytest.raises(ValueError):
            cache.set("x", None)

    def test_falsy_payloads_are_hits(self):
        cache = ResponseCache()
        cache.set("empty", [])
        assert cache.get("empty") == []
        assert cache.stats()["hits"] == 1
