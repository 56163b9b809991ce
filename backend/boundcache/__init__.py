"""
boundcache

Bounded in-process LRU cache with TTL, plus a Redis backend sharing the same
interface, read-through/invalidation services and Prometheus metrics.
"""

from .domain.cache.bounded_cache import BoundedCache
from .domain.cache.exceptions import (
    CacheException,
    InvalidArgumentException,
    InvalidConfigurationException,
    InvalidNotificationException,
)
from .domain.cache.repository_interfaces import (
    DEFAULT_TTL,
    CacheBackend,
    CacheEventListener,
)
from .domain.cache.sweeper import AsyncExpirySweeper, ExpirySweeper
from .domain.cache.value_objects import TTL, CacheStats

__version__ = "0.1.0"

__all__ = [
    "BoundedCache",
    "CacheBackend",
    "CacheEventListener",
    "DEFAULT_TTL",
    "TTL",
    "CacheStats",
    "ExpirySweeper",
    "AsyncExpirySweeper",
    "CacheException",
    "InvalidArgumentException",
    "InvalidConfigurationException",
    "InvalidNotificationException",
]
