"""Tests for CacheClient."""

from unittest.mock import Mock

import pytest

from fluxez.exceptions import ServerError, ServiceError
from fluxez.schema import CacheStats
from fluxez.services import CacheClient


@pytest.fixture
def cache(http, test_settings):
    return CacheClient(http, test_settings)


@pytest.fixture
def prefixed_cache(http, test_settings):
    test_settings.CACHE_PREFIX = "app"
    return CacheClient(http, test_settings)


class TestKeys:
    """Key prefixing."""

    def test_no_prefix(self, cache):
        assert cache.build_key("user:1") == "user:1"

    def test_prefix(self, prefixed_cache):
        assert prefixed_cache.build_key("user:1") == "app:user:1"


class TestOperations:
    """Single-key operations go through the operation endpoint."""

    def test_get_hit_and_miss(self, server, prefixed_cache):
        server.queue(json={"success": True, "data": {"value": {"name": "a"}}})
        assert prefixed_cache.get("user:1") == {"name": "a"}
        assert server.path() == "/cache/operation"
        assert server.body() == {"operation": "get", "key": "app:user:1"}
        server.queue(json={"success": True, "data": {"value": None}})
        assert prefixed_cache.get("user:2", default="fallback") == "fallback"

    def test_set_default_ttl_and_tags(self, server, cache):
        assert cache.set("k", [1, 2], tags=["users"]) is True
        assert server.body() == {"operation": "set", "key": "k", "value": [1, 2], "ttl": 3600, "tags": ["users"]}

    def test_set_reports_failure(self, server, cache):
        server.queue(json={"success": False, "message": "readonly"})
        with pytest.raises(ServiceError) as exc:
            cache.set("k", 1)
        assert exc.value.message == "readonly"

    def test_forever_uses_zero_ttl(self, server, cache):
        cache.forever("k", "v")
        assert server.body()["ttl"] == 0

    def test_exists_and_ttl(self, server, cache):
        server.queue(json={"exists": True}).queue(json={"ttl": None}).queue(json={"ttl": 42})
        assert cache.exists("k") is True
        assert cache.ttl("k") == -1
        assert cache.ttl("k") == 42

    def test_incr_decr(self, server, cache):
        server.queue(json={"value": 5}).queue(json={"value": 3})
        assert cache.incr("hits", 5) == 5
        assert server.body() == {"operation": "incr", "key": "hits", "value": 5}
        assert cache.decr("hits", 2) == 3

    def test_mget_missing_values(self, server, cache):
        server.queue(json={})
        assert cache.mget(["a", "b"]) == [None, None]
        server.queue(json={"values": [1, None]})
        assert cache.mget(["a", "b"]) == [1, None]

    def test_mset(self, server, prefixed_cache):
        assert prefixed_cache.mset({"a": 1, "b": 2}, ttl=10) is True
        assert server.body() == {
            "operation": "mset",
            "items": [{"key": "app:a", "value": 1}, {"key": "app:b", "value": 2}],
            "ttl": 10,
        }

    def test_sets(self, server, cache):
        server.queue(json={"added": 2}).queue(json={"members": ["x", "y"]})
        assert cache.sadd("s", ["x", "y"]) == 2
        assert cache.smembers("s") == ["x", "y"]

    def test_errors_propagate(self, server, cache, http):
        http.max_retries = 0
        server.queue(500)
        with pytest.raises(ServerError):
            cache.get("k")


class TestInvalidation:
    """Deletes and invalidation use DELETE with a JSON body."""

    def test_delete(self, server, prefixed_cache):
        server.queue(json={"deleted": 1})
        assert prefixed_cache.delete("k") is True
        assert server.last.method == "DELETE"
        assert server.path() == "/cache/invalidate"
        assert server.body() == {"keys": ["app:k"]}

    def test_delete_many_counts(self, server, cache):
        server.queue(json={"deleted": 0})
        assert cache.delete_many(["a", "b"]) == 0

    def test_pattern_is_prefixed(self, server, prefixed_cache):
        server.queue(json={"deleted": 4})
        assert prefixed_cache.invalidate_by_pattern("user:*") == 4
        assert server.body() == {"pattern": "app:user:*"}

    def test_tags_and_clear(self, server, cache):
        server.queue(json={"deleted": 2})
        assert cache.invalidate_by_tags(["users"]) == 2
        assert server.body() == {"tags": ["users"]}
        assert cache.clear() is True
        assert server.body() == {"all": True}


class TestHelpers:
    """stats and remember."""

    def test_stats(self, server, cache):
        server.queue(json={"hits": 8, "misses": 2, "hitRate": 0.8, "totalKeys": 5})
        stats = cache.stats()
        assert isinstance(stats, CacheStats)
        assert stats.hit_rate == 0.8
        assert stats.total_keys == 5

    def test_remember_hit_skips_callback(self, server, cache):
        server.queue(json={"value": "cached"})
        callback = Mock()
        assert cache.remember("k", 60, callback) == "cached"
        callback.assert_not_called()
        assert len(server.requests) == 1

    def test_remember_miss_computes_and_stores(self, server, cache):
        server.queue(json={"value": None})
        assert cache.remember("k", 60, lambda: "fresh") == "fresh"
        assert server.body() == {"operation": "set", "key": "k", "value": "fresh", "ttl": 60}
