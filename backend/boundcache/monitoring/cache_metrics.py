"""
Cache Metrics Collector

Prometheus metrics for in-process caches.
Attaches to a BoundedCache as its event listener and tracks hits, misses,
evictions, expirations and occupancy.
"""

from typing import Hashable, Optional

from prometheus_client import (
    Counter,
    Gauge,
    CollectorRegistry,
    generate_latest,
)
import structlog

from ..domain.cache.bounded_cache import BoundedCache
from ..domain.cache.repository_interfaces import CacheEventListener

logger = structlog.get_logger(__name__)


class CacheMetricsCollector(CacheEventListener):
    """
    Prometheus-compatible cache metrics.

    Metrics live on a dedicated CollectorRegistry so several collectors (and
    tests) never clash on metric names. ``cache_name`` labels every series.
    """

    def __init__(
        self,
        cache_name: str = "default",
        namespace: Optional[str] = None,
        registry: Optional[CollectorRegistry] = None,
    ):
        if namespace is None:
            from ..core.config import get_settings

            namespace = get_settings().METRICS_NAMESPACE

        self.cache_name = cache_name
        self.namespace = namespace
        self.registry = registry or CollectorRegistry()
        self._setup_prometheus_metrics()

    def _setup_prometheus_metrics(self) -> None:
        """Setup Prometheus metrics for the cache."""
        labels = ["cache"]

        self.prom_cache_hits_total = Counter(
            f"{self.namespace}_cache_hits_total",
            "Total number of cache hits",
            labels,
            registry=self.registry,
        )

        self.prom_cache_misses_total = Counter(
            f"{self.namespace}_cache_misses_total",
            "Total number of cache misses",
            labels,
            registry=self.registry,
        )

        self.prom_cache_evictions_total = Counter(
            f"{self.namespace}_cache_evictions_total",
            "Total number of entries evicted to respect capacity",
            labels,
            registry=self.registry,
        )

        self.prom_cache_expirations_total = Counter(
            f"{self.namespace}_cache_expirations_total",
            "Total number of entries removed after their TTL",
            labels,
            registry=self.registry,
        )

        self.prom_cache_writes_total = Counter(
            f"{self.namespace}_cache_writes_total",
            "Total number of cache writes",
            labels,
            registry=self.registry,
        )

        self.prom_cache_entries = Gauge(
            f"{self.namespace}_cache_entries",
            "Number of entries currently stored",
            labels,
            registry=self.registry,
        )

        self.prom_cache_capacity = Gauge(
            f"{self.namespace}_cache_capacity",
            "Maximum number of entries",
            labels,
            registry=self.registry,
        )

    def attach(self, cache: BoundedCache) -> BoundedCache:
        """Register as the cache's listener and seed the gauges."""
        cache.listener = self
        self.prom_cache_capacity.labels(cache=self.cache_name).set(cache.capacity)
        self.prom_cache_entries.labels(cache=self.cache_name).set(cache.size())
        logger.info(
            "Cache metrics attached",
            cache=self.cache_name,
            capacity=cache.capacity,
        )
        return cache

    # CacheEventListener

    def on_hit(self, key: Hashable) -> None:
        self.prom_cache_hits_total.labels(cache=self.cache_name).inc()

    def on_miss(self, key: Hashable) -> None:
        self.prom_cache_misses_total.labels(cache=self.cache_name).inc()

    def on_set(self, key: Hashable, size: int) -> None:
        self.prom_cache_writes_total.labels(cache=self.cache_name).inc()
        self.prom_cache_entries.labels(cache=self.cache_name).set(size)

    def on_remove(self, key: Hashable, size: int) -> None:
        self.prom_cache_entries.labels(cache=self.cache_name).set(size)

    def on_evict(self, key: Hashable) -> None:
        self.prom_cache_evictions_total.labels(cache=self.cache_name).inc()

    def on_expire(self, key: Hashable) -> None:
        self.prom_cache_expirations_total.labels(cache=self.cache_name).inc()
        self.prom_cache_entries.labels(cache=self.cache_name).dec()

    def on_clear(self, removed: int) -> None:
        self.prom_cache_entries.labels(cache=self.cache_name).set(0)

    def sample(self, name: str) -> float:
        """Current value of a metric for this cache (0 if never observed)."""
        value = self.registry.get_sample_value(name, {"cache": self.cache_name})
        return value or 0.0

    def export(self) -> bytes:
        """Render metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)
