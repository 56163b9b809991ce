"""
Cache Value Objects

Immutable value objects for the cache domain.
Provides type safety and validation for TTLs, statistics and change notifications.
"""

import math
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Union, Optional, Any

from pydantic import BaseModel, Field, field_validator

from .exceptions import InvalidArgumentException


class CacheEntryStatus(str, Enum):
    """Cache entry status enumeration."""

    ACTIVE = "active"
    EXPIRED = "expired"


class NotificationType(str, Enum):
    """Change notification types understood by the invalidation service."""

    CACHE_UPDATE = "CACHE_UPDATE"
    CACHE_INVALIDATE = "CACHE_INVALIDATE"
    CACHE_CLEAR = "CACHE_CLEAR"


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    Durations are expressed in (possibly fractional) seconds and must be positive
    and finite.
    """

    seconds: float

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if isinstance(self.seconds, bool) or not isinstance(self.seconds, (int, float)):
            raise InvalidArgumentException(
                "TTL must be a number of seconds", argument="ttl", value=self.seconds
            )
        if math.isnan(self.seconds) or self.seconds <= 0:
            raise InvalidArgumentException(
                "TTL must be positive", argument="ttl", value=self.seconds
            )
        if math.isinf(self.seconds):
            # no-expiry entries are stored with ttl=None
            raise InvalidArgumentException(
                "TTL must be finite", argument="ttl", value=self.seconds
            )

    @classmethod
    def of_seconds(cls, seconds: float) -> "TTL":
        """Create TTL from seconds."""
        return cls(seconds)

    @classmethod
    def minutes(cls, minutes: float) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60)

    @classmethod
    def hours(cls, hours: float) -> "TTL":
        """Create TTL from hours."""
        return cls(hours * 3600)

    @classmethod
    def from_value(cls, value: Union["TTL", timedelta, int, float]) -> "TTL":
        """Coerce seconds, a timedelta or an existing TTL into a TTL."""
        if isinstance(value, TTL):
            return value
        if isinstance(value, timedelta):
            return cls(value.total_seconds())
        return cls(value)

    @property
    def milliseconds(self) -> int:
        """TTL rounded up to whole milliseconds (never zero)."""
        return max(1, math.ceil(self.seconds * 1000))

    def __str__(self) -> str:
        return f"{self.seconds:g}s"


class CacheStats(BaseModel):
    """Point-in-time cache statistics."""

    capacity: int = Field(..., gt=0, description="Maximum number of entries")
    size: int = Field(..., ge=0, description="Entries currently stored")
    hits: int = Field(0, ge=0, description="Reads that returned a live value")
    misses: int = Field(0, ge=0, description="Reads that found nothing usable")
    evictions: int = Field(0, ge=0, description="Entries dropped to make room")
    expirations: int = Field(0, ge=0, description="Entries dropped after their TTL")

    @property
    def requests(self) -> int:
        """Total number of reads."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate (0-1); zero before the first read."""
        if self.requests == 0:
            return 0.0
        return self.hits / self.requests


class CacheNotification(BaseModel):
    """External change notification, e.g. consumed from a message broker."""

    type: NotificationType = Field(..., description="Kind of change")
    key: Optional[Any] = Field(None, description="Affected cache key")

    @field_validator("key")
    @classmethod
    def validate_key(cls, v):
        if isinstance(v, list):
            # JSON has no tuples; restore a hashable key
            return tuple(v)
        return v

    @property
    def requires_key(self) -> bool:
        return self.type != NotificationType.CACHE_CLEAR
