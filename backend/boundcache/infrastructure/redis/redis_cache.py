"""
Redis Cache Backend

CacheBackend implementation over a Redis server, used as the remote
counterpart of BoundedCache. Values are stored as JSON under a key prefix so
size() and clear() only ever touch this backend's keys. Keys are JSON-encoded
too, keeping keys of different types apart.
"""

import json
import time
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, List, Optional, TYPE_CHECKING

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError
import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ...domain.cache.exceptions import InvalidArgumentException
from ...domain.cache.repository_interfaces import (
    DEFAULT_TTL,
    CacheBackend,
    TTLArg,
    resolve_ttl,
)
from ...domain.cache.value_objects import TTL
from .exceptions import (
    RedisBackendException,
    RedisConnectionException,
    RedisSerializationException,
)

if TYPE_CHECKING:
    from ...core.config import Settings

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class RedisCacheBackend(CacheBackend):
    """
    Remote cache backed by Redis.

    The client is injected; retries and connection management stay with the
    redis-py client. Failures surface as RedisBackendException.
    """

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "boundcache:",
        default_ttl: TTLArg = None,
        scan_batch_size: int = 500,
    ):
        self.client = client
        self.key_prefix = key_prefix
        self.default_ttl: Optional[TTL] = resolve_ttl(
            None if default_ttl is DEFAULT_TTL else default_ttl, None
        )
        self.scan_batch_size = scan_batch_size

    @classmethod
    def from_settings(
        cls, settings: Optional["Settings"] = None, **overrides: Any
    ) -> "RedisCacheBackend":
        """Create a backend with a client built from REDIS_URL."""
        if settings is None:
            from ...core.config import get_settings

            settings = get_settings()

        client = redis.Redis.from_url(
            settings.REDIS_URL,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        options = {
            "key_prefix": settings.REDIS_KEY_PREFIX,
            "default_ttl": settings.cache_default_ttl,
        }
        options.update(overrides)
        return cls(client, **options)

    def _redis_key(self, key: Hashable) -> str:
        """
        Namespaced Redis key for a cache key.

        Keys are JSON-encoded so 1, "1" and (1,) stay distinct, as they are in
        BoundedCache. Tuples encode as JSON arrays.
        """
        try:
            encoded = json.dumps(key, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise InvalidArgumentException(
                "Redis cache keys must be JSON-encodable",
                argument="key",
                value=key,
            ) from e
        return f"{self.key_prefix}{encoded}"

    @contextmanager
    def _command(self, operation: str, key: Optional[str] = None) -> Iterator[Any]:
        """Trace a Redis call and translate client errors."""
        with tracer.start_as_current_span(f"redis_cache.{operation}") as span:
            span.set_attribute("db.system", "redis")
            if key:
                span.set_attribute("cache.key", key)
            try:
                yield span
            except (RedisConnectionError, RedisTimeoutError) as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "Redis connection failed", operation=operation, key=key, error=str(e)
                )
                raise RedisConnectionException(operation, key, e) from e
            except RedisError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "Redis command failed", operation=operation, key=key, error=str(e)
                )
                raise RedisBackendException(operation, key, original_error=e) from e

    def get(self, key: Hashable, default: Any = None) -> Any:
        redis_key = self._redis_key(key)
        with self._command("get", redis_key) as span:
            raw = self.client.get(redis_key)
            span.set_attribute("cache.hit", raw is not None)

        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            raise RedisSerializationException("get", redis_key, e) from e

    def set(self, key: Hashable, value: Any, ttl: TTLArg = DEFAULT_TTL) -> None:
        entry_ttl = resolve_ttl(ttl, self.default_ttl)
        redis_key = self._redis_key(key)
        try:
            data = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise RedisSerializationException("set", redis_key, e) from e

        with self._command("set", redis_key):
            if entry_ttl is not None:
                self.client.set(redis_key, data, px=entry_ttl.milliseconds)
            else:
                self.client.set(redis_key, data)

    def remove(self, key: Hashable) -> bool:
        redis_key = self._redis_key(key)
        with self._command("delete", redis_key):
            return self.client.delete(redis_key) > 0

    def contains(self, key: Hashable) -> bool:
        redis_key = self._redis_key(key)
        with self._command("exists", redis_key):
            return self.client.exists(redis_key) > 0

    def _scan_keys(self) -> List[Any]:
        return list(
            self.client.scan_iter(
                match=f"{self.key_prefix}*", count=self.scan_batch_size
            )
        )

    def size(self) -> int:
        with self._command("size"):
            return len(self._scan_keys())

    def clear(self) -> None:
        with self._command("clear") as span:
            keys = self._scan_keys()
            for start in range(0, len(keys), self.scan_batch_size):
                self.client.delete(*keys[start : start + self.scan_batch_size])
            span.set_attribute("cache.removed", len(keys))
        logger.info("Redis cache cleared", key_prefix=self.key_prefix, removed=len(keys))

    def health_check(self) -> Dict[str, Any]:
        """Ping Redis and report latency."""
        start = time.perf_counter()
        try:
            with self._command("ping"):
                self.client.ping()
        except RedisBackendException as e:
            return {"status": "unhealthy", "error": e.message}
        return {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 3),
            "key_prefix": self.key_prefix,
        }

    def close(self) -> None:
        self.client.close()
