"""
Cache Domain Services

Use cases built on top of a CacheBackend: populating the cache from a
slower store (read-through) and invalidating entries when that store
reports a change.
"""

import json
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, Union

from opentelemetry import trace
from pydantic import ValidationError

from .exceptions import InvalidNotificationException
from .repository_interfaces import DEFAULT_TTL, CacheBackend, TTLArg
from .value_objects import CacheNotification, NotificationType

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_MISSING = object()

Loader = Callable[[Hashable], Any]


class ReadThroughService:
    """
    Domain service for read-through caching.

    Looks a key up in the cache and, on a miss, loads it from the backing
    store and caches the result.
    """

    def __init__(
        self,
        cache: CacheBackend,
        loader: Loader,
        ttl: TTLArg = DEFAULT_TTL,
        cache_none: bool = False,
    ):
        self.cache = cache
        self.loader = loader
        self.ttl = ttl
        self.cache_none = cache_none
        self.loads = 0

    def get_or_load(self, key: Hashable) -> Any:
        """
        Return the cached value for key, loading it on a miss.

        Loader errors propagate unchanged and nothing is cached for the key.
        """
        value = self.cache.get(key, _MISSING)
        if value is not _MISSING:
            return value

        with tracer.start_as_current_span("cache.read_through.load") as span:
            span.set_attribute("cache.key", str(key))
            try:
                value = self.loader(key)
            except Exception as e:
                logger.error(f"Failed to load value for cache key {key!r}: {e}")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                raise

            self.loads += 1
            if value is None and not self.cache_none:
                span.set_attribute("cache.stored", False)
                return None

            self.cache.set(key, value, self.ttl)
            span.set_attribute("cache.stored", True)
            return value

    def refresh(self, key: Hashable) -> Any:
        """Drop any cached value for key and load it again."""
        self.cache.remove(key)
        return self.get_or_load(key)


class CacheInvalidationService:
    """
    Domain service for cache invalidation.

    Removes entries when an external store reports a change. The transport
    delivering notifications (broker consumer, webhook, ...) belongs to the caller.
    """

    def __init__(self, cache: CacheBackend):
        self.cache = cache

    def invalidate(self, key: Hashable, reason: str = "external_update") -> bool:
        """
        Invalidate a single cache entry.

        Returns:
            True if an entry was removed
        """
        with tracer.start_as_current_span("cache.invalidate") as span:
            span.set_attribute("cache.key", str(key))
            span.set_attribute("reason", reason)

            removed = self.cache.remove(key)
            span.set_attribute("removed", removed)
            logger.debug(
                f"Invalidated cache key {key!r}",
                extra={"key": str(key), "reason": reason, "removed": removed},
            )
            return removed

    def invalidate_many(
        self, keys: Iterable[Hashable], reason: str = "external_update"
    ) -> int:
        """
        Invalidate several cache entries.

        Returns:
            Number of entries removed
        """
        with tracer.start_as_current_span("cache.invalidate_many") as span:
            span.set_attribute("reason", reason)

            removed_count = 0
            for key in keys:
                if self.cache.remove(key):
                    removed_count += 1

            span.set_attribute("invalidated_count", removed_count)
            logger.info(
                f"Invalidated {removed_count} cache entries",
                extra={"reason": reason, "count": removed_count},
            )
            return removed_count

    def invalidate_all(self, reason: str = "external_clear") -> None:
        """Drop every cache entry."""
        with tracer.start_as_current_span("cache.invalidate_all") as span:
            span.set_attribute("reason", reason)
            self.cache.clear()
            logger.info("Invalidated all cache entries", extra={"reason": reason})

    def handle_notification(
        self, payload: Union[str, bytes, bytearray, Dict[str, Any]]
    ) -> bool:
        """
        Apply a change notification.

        Accepts a JSON document or an already-decoded mapping shaped like
        ``{"type": "CACHE_UPDATE", "key": "user:42"}``. ``CACHE_UPDATE`` and
        ``CACHE_INVALIDATE`` remove the key; ``CACHE_CLEAR`` empties the cache.

        Returns:
            True if the notification removed anything

        Raises:
            InvalidNotificationException: payload is malformed
        """
        notification = self.parse_notification(payload)

        if notification.type == NotificationType.CACHE_CLEAR:
            had_entries = self.cache.size() > 0
            self.invalidate_all(reason="notification")
            return had_entries

        return self.invalidate(notification.key, reason=notification.type.value)

    @staticmethod
    def parse_notification(
        payload: Union[str, bytes, bytearray, Dict[str, Any]]
    ) -> CacheNotification:
        """Decode and validate a change notification."""
        try:
            if isinstance(payload, (str, bytes, bytearray)):
                payload = json.loads(payload)
            notification = CacheNotification.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as e:
            raise InvalidNotificationException(
                "Malformed cache notification", payload=payload, original_error=e
            ) from e

        if notification.requires_key:
            if notification.key is None:
                raise InvalidNotificationException(
                    f"{notification.type.value} notification requires a key",
                    payload=payload,
                )
            try:
                hash(notification.key)
            except TypeError as e:
                raise InvalidNotificationException(
                    "Notification key must be hashable",
                    payload=payload,
                    original_error=e,
                ) from e

        return notification
