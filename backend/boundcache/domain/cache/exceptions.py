"""
Cache Domain Exceptions

Error taxonomy for cache operations.
Misses, evictions and expiry are normal outcomes and never raise.
"""

from typing import Optional, Any, Dict


class CacheException(Exception):
    """Base exception for cache errors.

    Carries a machine-readable error code and a details mapping
    alongside the human-readable message.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidConfigurationException(CacheException, ValueError):
    """Raised when a cache is constructed with invalid settings."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message, error_code="CACHE_INVALID_CONFIGURATION", details=details
        )


class InvalidArgumentException(CacheException, ValueError):
    """Raised when an operation receives an invalid argument (e.g. non-positive TTL)."""

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        value: Optional[Any] = None,
        error_code: str = "CACHE_INVALID_ARGUMENT",
    ):
        details = {}
        if argument:
            details["argument"] = argument
        if value is not None:
            details["value"] = str(value)

        super().__init__(message=message, error_code=error_code, details=details)


class InvalidNotificationException(InvalidArgumentException):
    """Raised when a cache change notification cannot be parsed."""

    def __init__(
        self,
        message: str,
        payload: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            argument="payload",
            value=payload,
            error_code="CACHE_INVALID_NOTIFICATION",
        )
        if original_error:
            self.details["original_error"] = str(original_error)
            self.details["original_error_type"] = type(original_error).__name__
            self.__cause__ = original_error
