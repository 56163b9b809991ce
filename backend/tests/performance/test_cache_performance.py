"""
Performance tests for cache operations.

Validates that in-process cache operations meet latency requirements:
- Cache reads (hits and misses): 95% under 0.5ms
- Cache writes with eviction: 95% under 0.5ms
- A warm BoundedCache spares the backing store most reads

Thresholds are generous so the suite stays stable on shared CI runners.
"""

import statistics
import time
from typing import Callable, Dict, Any

import pytest

from boundcache.domain.cache.bounded_cache import BoundedCache
from boundcache.monitoring.cache_metrics import CacheMetricsCollector
from prometheus_client import CollectorRegistry

from tests.performance.benchmark_runner import (
    BenchmarkConfig,
    CacheBenchmarkRunner,
    percentiles,
)

pytestmark = pytest.mark.performance


class TestCachePerformance:
    """Performance tests for BoundedCache operations."""

    @pytest.fixture
    def warm_cache(self):
        cache = BoundedCache(10_000, default_ttl=300)
        for i in range(10_000):
            cache.set(f"user:{i}", {"_id": i, "name": f"User {i}"})
        return cache

    def _run_performance_test(
        self,
        operation: Callable[[int], Any],
        iterations: int = 5_000,
        p95_threshold_ms: float = 0.5,
        p99_threshold_ms: float = 2.0,
    ) -> Dict[str, Any]:
        """
        Run performance test for an operation.

        Args:
            operation: Callable receiving the iteration index
            iterations: Number of iterations to run
            p95_threshold_ms: 95th percentile threshold in milliseconds
            p99_threshold_ms: 99th percentile threshold in milliseconds

        Returns:
            Performance test results
        """
        execution_times = []
        for i in range(iterations):
            start_time = time.perf_counter()
            operation(i)
            execution_times.append((time.perf_counter() - start_time) * 1000)

        results = percentiles(execution_times)
        results.update(
            {
                "iterations": iterations,
                "p95_threshold_ms": p95_threshold_ms,
                "p99_threshold_ms": p99_threshold_ms,
                "p95_passed": results["p95_time_ms"] <= p95_threshold_ms,
                "p99_passed": results["p99_time_ms"] <= p99_threshold_ms,
            }
        )
        results["all_passed"] = results["p95_passed"] and results["p99_passed"]
        return results

    def test_cache_hit_performance(self, warm_cache):
        results = self._run_performance_test(
            lambda i: warm_cache.get(f"user:{i % 10_000}")
        )

        print(f"Cache hit performance: {results}")
        assert results["p95_passed"], f"P95 {results['p95_time_ms']}ms over threshold"
        assert warm_cache.stats().hits == 5_000

    def test_cache_miss_performance(self, warm_cache):
        results = self._run_performance_test(lambda i: warm_cache.get(f"absent:{i}"))

        print(f"Cache miss performance: {results}")
        assert results["p95_passed"], f"P95 {results['p95_time_ms']}ms over threshold"

    def test_cache_write_with_eviction_performance(self):
        cache = BoundedCache(1_000)
        results = self._run_performance_test(lambda i: cache.set(f"user:{i}", i))

        print(f"Cache write performance: {results}")
        assert results["p95_passed"], f"P95 {results['p95_time_ms']}ms over threshold"
        assert cache.size() == 1_000
        assert cache.stats().evictions == 4_000

    def test_operations_scale_with_constant_cost(self):
        """Per-operation cost must not grow with cache size."""
        medians = []
        for capacity in (1_000, 100_000):
            cache = BoundedCache(capacity)
            for i in range(capacity):
                cache.set(i, i)
            times = []
            for i in range(2_000):
                start = time.perf_counter()
                cache.get(i)
                cache.set(capacity + i, i)
                times.append(time.perf_counter() - start)
            medians.append(statistics.median(times))

        assert medians[1] < medians[0] * 10

    def test_metrics_overhead(self, warm_cache):
        collector = CacheMetricsCollector(
            namespace="perf", registry=CollectorRegistry()
        )
        collector.attach(warm_cache)

        results = self._run_performance_test(
            lambda i: warm_cache.get(f"user:{i % 10_000}"), p95_threshold_ms=1.0
        )

        print(f"Cache hit performance with metrics: {results}")
        assert results["p95_passed"]
        assert collector.sample("perf_cache_hits_total") == 5_000


class TestCacheStrategyBenchmark:
    """Small end-to-end run of the strategy benchmark."""

    @pytest.fixture
    def runner(self):
        config = BenchmarkConfig(
            dataset_size=2_000,
            cache_capacity=600,
            iterations=2_000,
            hit_iterations=200,
            store_latency_ms=0.0,
            hot_key_count=300,
        )
        return CacheBenchmarkRunner(config)

    def test_bounded_cache_spares_the_store(self, runner):
        no_cache = runner.run_no_cache()
        bounded = runner.run_bounded_cache()

        assert no_cache.store_reads == 2_000
        assert bounded.store_reads < no_cache.store_reads * 0.5
        assert bounded.extra["entries"] <= 600
        assert bounded.hit_rate > 0.5

    def test_unbounded_dict_grows_past_capacity(self, runner):
        result = runner.run_dict_cache()
        assert result.extra["entries"] > 600

    def test_full_report(self, runner):
        report = runner.run_all()

        names = [strategy["name"] for strategy in report["strategies"]]
        assert names == ["No cache", "In-memory dict", "BoundedCache (LRU)"]
        assert set(report["hit_latency"]) == {"In-memory dict", "BoundedCache (LRU)"}
        assert set(report["memory_mb"]) == {"In-memory dict", "BoundedCache (LRU)"}
