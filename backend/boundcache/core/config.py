"""
boundcache Configuration

Configuration management with environment variable support.
Implements secure defaults and validation for all settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # In-process cache configuration
    CACHE_CAPACITY: int = Field(
        default=1000, ge=1, description="Maximum number of cache entries"
    )
    CACHE_DEFAULT_TTL_SECONDS: float = Field(
        default=300.0,
        ge=0,
        description="Default entry TTL in seconds (0 disables the default TTL)",
    )
    CACHE_THREAD_SAFE: bool = Field(
        default=True, description="Guard cache operations with an internal lock"
    )
    CACHE_COPY_VALUES: bool = Field(
        default=True, description="Deep-copy values stored in and read from the cache"
    )
    CACHE_SWEEP_INTERVAL_SECONDS: float = Field(
        default=0.0,
        ge=0,
        description="Expiry sweep interval in seconds (0 disables sweeping)",
    )

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    REDIS_KEY_PREFIX: str = Field(
        default="boundcache:", description="Namespace prepended to every Redis key"
    )
    REDIS_SOCKET_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis socket timeout in seconds"
    )

    # Monitoring
    METRICS_NAMESPACE: str = Field(
        default="boundcache", description="Prefix for Prometheus metric names"
    )

    # Development and debugging
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must be a redis://, rediss:// or unix:// URL")
        return v

    @field_validator("METRICS_NAMESPACE")
    @classmethod
    def validate_metrics_namespace(cls, v):
        """Prometheus names allow letters, digits and underscores only."""
        if not v or not v.replace("_", "").isalnum() or v[0].isdigit():
            raise ValueError("METRICS_NAMESPACE must be a valid Prometheus name prefix")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def cache_default_ttl(self) -> Optional[float]:
        """Default TTL in seconds, or None when disabled."""
        return self.CACHE_DEFAULT_TTL_SECONDS or None

    @property
    def cache_sweep_interval(self) -> Optional[float]:
        """Sweep interval in seconds, or None when disabled."""
        return self.CACHE_SWEEP_INTERVAL_SECONDS or None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
