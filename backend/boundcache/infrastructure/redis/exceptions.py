"""
Redis Infrastructure Exceptions

Exceptions for the Redis-backed cache.
Redis client errors are wrapped, never swallowed; the original error is chained.
"""

from typing import Optional

from ...domain.cache.exceptions import CacheException


class RedisBackendException(CacheException):
    """Raised when a Redis command issued by the cache backend fails."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "REDIS_BACKEND_ERROR",
    ):
        details = {"operation": operation}
        if key:
            details["key"] = key
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        message = f"Redis operation '{operation}' failed"
        if original_error:
            message = f"{message}: {original_error}"

        super().__init__(message=message, error_code=error_code, details=details)
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class RedisConnectionException(RedisBackendException):
    """Raised when Redis cannot be reached."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            operation=operation,
            key=key,
            original_error=original_error,
            error_code="REDIS_CONNECTION_ERROR",
        )


class RedisSerializationException(RedisBackendException):
    """Raised when a value cannot be encoded to or decoded from JSON."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            operation=operation,
            key=key,
            original_error=original_error,
            error_code="REDIS_SERIALIZATION_ERROR",
        )
