"""
Cache Performance Testing Suite.

Latency checks for BoundedCache operations and a benchmark runner comparing
caching strategies (no cache, unbounded dict, BoundedCache, Redis).
"""
