"""
Unit tests for CacheMetricsCollector.
"""

import pytest
from prometheus_client import CollectorRegistry

from boundcache.domain.cache.bounded_cache import BoundedCache
from boundcache.monitoring.cache_metrics import CacheMetricsCollector


@pytest.fixture
def collector():
    return CacheMetricsCollector(
        cache_name="users", namespace="test", registry=CollectorRegistry()
    )


class TestCacheMetricsCollector:
    """Test Prometheus metrics for the bounded cache."""

    def test_attach_seeds_gauges(self, collector, clock):
        cache = BoundedCache(5, clock=clock)
        cache.set("a", 1)

        collector.attach(cache)

        assert cache.listener is collector
        assert collector.sample("test_cache_capacity") == 5
        assert collector.sample("test_cache_entries") == 1

    def test_hits_and_misses(self, collector, clock):
        cache = collector.attach(BoundedCache(5, clock=clock))
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("b")

        assert collector.sample("test_cache_hits_total") == 2
        assert collector.sample("test_cache_misses_total") == 1
        assert collector.sample("test_cache_writes_total") == 1

    def test_evictions(self, collector, clock):
        cache = collector.attach(BoundedCache(2, clock=clock))
        for key in "abcd":
            cache.set(key, key)

        assert collector.sample("test_cache_evictions_total") == 2
        assert collector.sample("test_cache_entries") == 2

    def test_expirations(self, collector, clock):
        cache = collector.attach(BoundedCache(5, clock=clock))
        cache.set("a", 1, ttl=1)
        cache.set("b", 2, ttl=1)
        cache.set("c", 3)
        clock.advance(2)

        cache.get("a")
        cache.purge_expired()

        assert collector.sample("test_cache_expirations_total") == 2
        assert collector.sample("test_cache_entries") == 1

    def test_remove_and_clear_update_entries(self, collector, clock):
        cache = collector.attach(BoundedCache(5, clock=clock))
        cache.set("a", 1)
        cache.set("b", 2)

        cache.remove("a")
        assert collector.sample("test_cache_entries") == 1

        cache.clear()
        assert collector.sample("test_cache_entries") == 0

    def test_unobserved_metric_is_zero(self, collector):
        assert collector.sample("test_cache_hits_total") == 0.0

    def test_export(self, collector, clock):
        cache = collector.attach(BoundedCache(5, clock=clock))
        cache.get("missing")

        output = collector.export().decode()

        assert 'test_cache_misses_total{cache="users"} 1.0' in output
        assert "# TYPE test_cache_entries gauge" in output

    def test_namespace_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("METRICS_NAMESPACE", "svc")
        collector = CacheMetricsCollector(registry=CollectorRegistry())

        assert collector.namespace == "svc"

    def test_separate_registries_do_not_clash(self):
        first = CacheMetricsCollector(namespace="dup", registry=CollectorRegistry())
        second = CacheMetricsCollector(namespace="dup", registry=CollectorRegistry())

        assert first.registry is not second.registry
