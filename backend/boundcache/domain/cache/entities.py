"""
Cache Domain Entities

Cache entry entity with expiry and recency bookkeeping.
Timestamps are readings of the cache's injected clock, not wall-clock datetimes.
"""

from dataclasses import dataclass
from typing import Optional, Any, Hashable

from .value_objects import TTL, CacheEntryStatus


@dataclass
class CacheEntry:
    """
    Cache entry entity.

    Owned exclusively by a cache; callers only ever see CacheEntryInfo snapshots.
    """

    key: Hashable
    value: Any
    inserted_at: float
    last_accessed_at: float
    expires_at: Optional[float] = None

    @classmethod
    def create(
        cls, key: Hashable, value: Any, now: float, ttl: Optional[TTL] = None
    ) -> "CacheEntry":
        """Create new cache entry."""
        return cls(
            key=key,
            value=value,
            inserted_at=now,
            last_accessed_at=now,
            expires_at=now + ttl.seconds if ttl else None,
        )

    def is_expired(self, now: float) -> bool:
        """Check if entry is expired at the given clock reading."""
        return self.expires_at is not None and self.expires_at <= now

    def touch(self, now: float) -> None:
        """Record access to cache entry."""
        self.last_accessed_at = now

    def replace(self, value: Any, now: float, ttl: Optional[TTL] = None) -> None:
        """Replace value and restart the entry's lifetime."""
        self.value = value
        self.inserted_at = now
        self.last_accessed_at = now
        self.expires_at = now + ttl.seconds if ttl else None

    def remaining_ttl(self, now: float) -> Optional[float]:
        """Seconds until expiry, or None for entries without TTL."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - now)

    def get_status(self, now: float) -> CacheEntryStatus:
        """Get current status of cache entry."""
        if self.is_expired(now):
            return CacheEntryStatus.EXPIRED
        return CacheEntryStatus.ACTIVE

    def info(self, now: float) -> "CacheEntryInfo":
        """Immutable snapshot of this entry."""
        return CacheEntryInfo(
            key=self.key,
            value=self.value,
            inserted_at=self.inserted_at,
            last_accessed_at=self.last_accessed_at,
            expires_at=self.expires_at,
            status=self.get_status(now),
        )


@dataclass(frozen=True)
class CacheEntryInfo:
    """Read-only view of a cache entry."""

    key: Hashable
    value: Any
    inserted_at: float
    last_accessed_at: float
    expires_at: Optional[float]
    status: CacheEntryStatus
