"""
Redis Infrastructure Module

Redis-backed implementation of the CacheBackend interface.

This module provides:
- RedisCacheBackend: remote cache with the same contract as BoundedCache
- Exceptions wrapping redis-py errors
- OpenTelemetry spans around every Redis command
"""

from .redis_cache import RedisCacheBackend
from .exceptions import (
    RedisBackendException,
    RedisConnectionException,
    RedisSerializationException,
)

__all__ = [
    # Backend
    "RedisCacheBackend",
    # Exceptions
    "RedisBackendException",
    "RedisConnectionException",
    "RedisSerializationException",
]
