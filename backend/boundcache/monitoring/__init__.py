"""
Monitoring Module

Prometheus metrics for caches.
"""

from .cache_metrics import CacheMetricsCollector

__all__ = ["CacheMetricsCollector"]
