"""
Shared configuration management for the media catalog gateway.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local", description="dev disables bearer token checks")
    log_level: str = Field(default="info")

    # Public base URL used when building info/watch/search links
    base_url: str = Field(default="http://localhost:3000")

    # Cache store; no redis_host means the cache is disabled
    redis_host: Optional[str] = Field(default=None)
    redis_port: int = Field(default=6379)
    redis_username: Optional[str] = Field(default=None)
    redis_password: Optional[str] = Field(default=None)
    redis_db: int = Field(default=0)
    cache_backend: str = Field(default="redis", description="redis | memory")
    cache_namespace: str = Field(default="flixhq")
    cache_coalesce_misses: bool = Field(default=False)

    # Per-resource TTLs (seconds)
    trending_ttl_seconds: int = Field(default=60 * 60 * 3, gt=0)
    info_ttl_seconds: int = Field(default=60 * 60 * 3, gt=0)
    watch_ttl_seconds: int = Field(default=60 * 30, gt=0)
    search_ttl_seconds: int = Field(default=60 * 60 * 24, gt=0)

    # Upstream provider
    provider_url: str = Field(default="http://localhost:3001/movies/flixhq")
    provider_timeout_seconds: float = Field(default=10.0, gt=0)
    provider_retry_attempts: int = Field(default=3, ge=1)
    producer_timeout_seconds: Optional[float] = Field(default=30.0)

    # Security
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")

    @property
    def cache_enabled(self) -> bool:
        """True when a cache store should be built at startup."""
        return self.cache_backend == "memory" or bool(self.redis_host)

    @property
    def auth_required(self) -> bool:
        return self.env != "dev"


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = 3000
    host: str = "0.0.0.0"


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    Values come from CATALOG_* environment variables (or .env); keyword
    overrides win over the environment.
    """
    return ServiceConfig(service_name=service_name, **overrides)
