"""
Cache Repository Interfaces

Abstract contracts shared by the in-process cache and remote cache backends,
plus the listener interface used to observe cache events.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from typing import Any, Hashable, Optional, Union

from .value_objects import TTL


class _DefaultTTL(Enum):
    DEFAULT = "default"

    def __repr__(self) -> str:
        return "DEFAULT_TTL"


# Passed (or left as the default) for ``ttl`` to mean "use the backend's default TTL".
# ``ttl=None`` means the entry never expires.
DEFAULT_TTL = _DefaultTTL.DEFAULT

TTLArg = Union[TTL, timedelta, int, float, None, _DefaultTTL]


class CacheBackend(ABC):
    """
    Abstract key/value cache.

    Gives callers one interface whether the cache is local or remote.
    Misses are reported through return values, never exceptions.
    """

    @abstractmethod
    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the live value for key, or default."""
        pass

    @abstractmethod
    def set(self, key: Hashable, value: Any, ttl: TTLArg = DEFAULT_TTL) -> None:
        """Store value under key."""
        pass

    @abstractmethod
    def remove(self, key: Hashable) -> bool:
        """Remove key; return whether it existed."""
        pass

    @abstractmethod
    def contains(self, key: Hashable) -> bool:
        """Check whether a live entry exists for key."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Number of stored entries."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        pass


class CacheEventListener:
    """
    Observer for cache events.

    Methods are called after the cache has released its lock; the default
    implementations do nothing so listeners override only what they need.
    """

    def on_hit(self, key: Hashable) -> None:
        pass

    def on_miss(self, key: Hashable) -> None:
        pass

    def on_set(self, key: Hashable, size: int) -> None:
        pass

    def on_remove(self, key: Hashable, size: int) -> None:
        pass

    def on_evict(self, key: Hashable) -> None:
        pass

    def on_expire(self, key: Hashable) -> None:
        pass

    def on_clear(self, removed: int) -> None:
        pass


def resolve_ttl(ttl: TTLArg, default_ttl: Optional[TTL]) -> Optional[TTL]:
    """Normalize a ttl argument; raises InvalidArgumentException when non-positive."""
    if ttl is DEFAULT_TTL:
        return default_ttl
    if ttl is None:
        return None
    return TTL.from_value(ttl)
