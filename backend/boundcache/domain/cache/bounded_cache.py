"""
Bounded Cache

In-process key/value cache with a fixed capacity, least-recently-used
eviction and optional per-entry TTL with lazy expiry.
"""

import copy
import threading
from collections import OrderedDict
from contextlib import nullcontext
from dataclasses import replace
from typing import Any, Hashable, List, Optional, Tuple, TYPE_CHECKING

import structlog

from .clock import Clock, system_clock
from .entities import CacheEntry, CacheEntryInfo
from .exceptions import InvalidArgumentException, InvalidConfigurationException
from .repository_interfaces import (
    DEFAULT_TTL,
    CacheBackend,
    CacheEventListener,
    TTLArg,
    resolve_ttl,
)
from .value_objects import TTL, CacheStats

if TYPE_CHECKING:
    from ...core.config import Settings

logger = structlog.get_logger(__name__)

_MISSING = object()


class BoundedCache(CacheBackend):
    """
    Bounded LRU cache with optional TTL.

    Entries live in an OrderedDict ordered least- to most-recently used, so
    recency updates and victim selection are O(1). Among entries that were never
    read, eviction follows insertion order.

    With ``thread_safe=True`` every operation holds an internal lock for the
    duration of its bookkeeping only; listener callbacks run after release.
    With ``thread_safe=False`` callers must serialize access themselves.

    Values are deep-copied on the way in and on the way out, so callers never
    hold a reference into cache-owned state. ``copy_values=False`` stores and
    returns the objects themselves for callers that treat values as immutable.
    """

    def __init__(
        self,
        capacity: int,
        default_ttl: TTLArg = None,
        *,
        clock: Clock = system_clock,
        thread_safe: bool = True,
        listener: Optional[CacheEventListener] = None,
        copy_values: bool = True,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidConfigurationException(
                "Cache capacity must be a positive integer",
                config_key="capacity",
                config_value=capacity,
            )
        if default_ttl is DEFAULT_TTL:
            default_ttl = None
        try:
            self._default_ttl: Optional[TTL] = resolve_ttl(default_ttl, None)
        except InvalidArgumentException as e:
            raise InvalidConfigurationException(
                "Default TTL must be positive",
                config_key="default_ttl",
                config_value=default_ttl,
            ) from e

        self._capacity = capacity
        self._clock = clock
        self._thread_safe = thread_safe
        self._lock = threading.RLock() if thread_safe else nullcontext()
        self._listener = listener
        self._copy_values = copy_values
        self._entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

        logger.debug(
            "Bounded cache created",
            capacity=capacity,
            default_ttl=str(self._default_ttl) if self._default_ttl else None,
            thread_safe=thread_safe,
        )

    @classmethod
    def from_settings(
        cls, settings: Optional["Settings"] = None, **overrides: Any
    ) -> "BoundedCache":
        """Build a cache from application settings; keyword arguments win."""
        if settings is None:
            from ...core.config import get_settings

            settings = get_settings()

        options = {
            "capacity": settings.CACHE_CAPACITY,
            "default_ttl": settings.cache_default_ttl,
            "thread_safe": settings.CACHE_THREAD_SAFE,
            "copy_values": settings.CACHE_COPY_VALUES,
        }
        options.update(overrides)
        return cls(**options)

    # Configuration

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def default_ttl(self) -> Optional[TTL]:
        return self._default_ttl

    @property
    def thread_safe(self) -> bool:
        return self._thread_safe

    @property
    def copy_values(self) -> bool:
        return self._copy_values

    @property
    def listener(self) -> Optional[CacheEventListener]:
        return self._listener

    @listener.setter
    def listener(self, listener: Optional[CacheEventListener]) -> None:
        self._listener = listener

    # Core operations

    def get(self, key: Hashable, default: Any = None) -> Any:
        """
        Return the value stored for key, or default on a miss.

        A hit moves the key to the most-recently-used end. An entry found past
        its expiry is removed and reported as a miss.
        """
        expired = False
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                del self._entries[key]
                self._expirations += 1
                expired = True
                entry = None

            if entry is None:
                self._misses += 1
                value = _MISSING
            else:
                entry.touch(now)
                self._entries.move_to_end(key)
                self._hits += 1
                value = self._copy(entry.value)

        if self._listener is not None:
            if expired:
                self._listener.on_expire(key)
            if value is _MISSING:
                self._listener.on_miss(key)
            else:
                self._listener.on_hit(key)

        return default if value is _MISSING else value

    def set(self, key: Hashable, value: Any, ttl: TTLArg = DEFAULT_TTL) -> None:
        """
        Store value under key at the most-recently-used end.

        ``ttl`` defaults to the cache's default TTL; ``None`` stores the entry
        without expiry. Inserting a new key into a full cache first evicts the
        least-recently-used entry, whether or not that entry has expired.
        """
        entry_ttl = resolve_ttl(ttl, self._default_ttl)
        value = self._copy(value)

        evicted: List[Hashable] = []
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None:
                entry.replace(value, now, entry_ttl)
                self._entries.move_to_end(key)
            else:
                while len(self._entries) >= self._capacity:
                    victim, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    evicted.append(victim)
                self._entries[key] = CacheEntry.create(key, value, now, entry_ttl)
            size = len(self._entries)

        if self._listener is not None:
            for victim in evicted:
                self._listener.on_evict(victim)
            self._listener.on_set(key, size)

    def remove(self, key: Hashable) -> bool:
        """Remove key; return whether it was present."""
        with self._lock:
            existed = self._entries.pop(key, None) is not None
            size = len(self._entries)

        if existed and self._listener is not None:
            self._listener.on_remove(key, size)
        return existed

    def contains(self, key: Hashable) -> bool:
        """
        Check for a live entry without touching recency.

        An entry past its expiry reports False but is left for the next lookup
        or sweep to reclaim.
        """
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet reclaimed."""
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Remove all entries. Capacity and default TTL are unchanged."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()

        logger.info("Bounded cache cleared", removed=removed)
        if self._listener is not None:
            self._listener.on_clear(removed)

    # Maintenance and inspection

    def purge_expired(self) -> int:
        """Remove every expired entry; live entries are never touched."""
        with self._lock:
            now = self._clock()
            expired = [
                key for key, entry in self._entries.items() if entry.is_expired(now)
            ]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)

        if self._listener is not None:
            for key in expired:
                self._listener.on_expire(key)
        return len(expired)

    def get_entry_info(self, key: Hashable) -> Optional[CacheEntryInfo]:
        """Snapshot of the entry for key, without touching recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            info = entry.info(self._clock())
            return replace(info, value=self._copy(info.value))

    def keys(self) -> List[Hashable]:
        """Live keys ordered from least- to most-recently used."""
        with self._lock:
            now = self._clock()
            return [
                key for key, entry in self._entries.items() if not entry.is_expired(now)
            ]

    def items(self) -> List[Tuple[Hashable, Any]]:
        """Live (key, value) pairs ordered from least- to most-recently used."""
        with self._lock:
            now = self._clock()
            return [
                (key, self._copy(entry.value))
                for key, entry in self._entries.items()
                if not entry.is_expired(now)
            ]

    def stats(self) -> CacheStats:
        """Current counters and occupancy."""
        with self._lock:
            return CacheStats(
                capacity=self._capacity,
                size=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._expirations = 0

    def _copy(self, value: Any) -> Any:
        return copy.deepcopy(value) if self._copy_values else value

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Hashable) -> bool:
        return self.contains(key)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self._capacity}, "
            f"size={len(self._entries)}, default_ttl={self._default_ttl})"
        )

