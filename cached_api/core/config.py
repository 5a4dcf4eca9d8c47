"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Store connection parameters, per-route cache TTL
overrides and the cacheable body size make up the cache-related configuration.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cached_api.core.constants import (
    DEFAULT_CACHE_MAX_BODY_BYTES,
    DEFAULT_CACHE_TTL,
    FORCE_CACHE_PARAM,
    PAYMENT_CACHE_TTL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; validate_cache_settings rejects
    non-positive TTLs and body limits, a negative reconnect interval and
    an empty force-cache parameter name.
    """

    # App
    app_name: str = "cached-api"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Document store (SQLAlchemy async URL)
    database_url: str = "sqlite+aiosqlite:///./cached_api.db"
    database_echo: bool = False

    # Redis (key-value store backing the response cache)
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_tls: bool = False
    # Bounded timeouts on every store round-trip; a timeout degrades like a store failure.
    redis_socket_timeout: float = 2.0
    redis_connect_timeout: float = 5.0
    # Seconds between reconnect attempts while the store is unreachable.
    redis_reconnect_interval: float = 5.0

    # Response cache
    cache_default_ttl: int = DEFAULT_CACHE_TTL
    # Path prefix -> TTL seconds; longest matching prefix wins.
    cache_route_ttls: dict[str, int] = Field(
        default_factory=lambda: {"/api/v1/payments": PAYMENT_CACHE_TTL}
    )
    cache_force_param: str = FORCE_CACHE_PARAM
    cache_path_prefixes: list[str] = Field(default_factory=lambda: ["/api/v1"])
    # fnmatch globs that are never cached even under cache_path_prefixes.
    cache_exclude_paths: list[str] = Field(
        default_factory=lambda: [
            "/api/v1/health*",
            "/api/v1/cache/*",
            "/api/v1/blogs/*/views",
        ]
    )
    # When True, mutations also invalidate the transparent cache:<route>* entries.
    cache_invalidate_transparent_keys: bool = True
    # Responses with a larger body are passed through without being stored.
    cache_max_body_bytes: int = DEFAULT_CACHE_MAX_BODY_BYTES

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cache_settings(self) -> "Settings":
        """Validate TTLs and the force-cache parameter name."""
        if self.cache_default_ttl <= 0:
            raise ValueError(
                f"CACHE_DEFAULT_TTL must be positive, got: {self.cache_default_ttl}"
            )
        for prefix, ttl in self.cache_route_ttls.items():
            if ttl <= 0:
                raise ValueError(
                    f"CACHE_ROUTE_TTLS entry {prefix!r} must be positive, got: {ttl}"
                )
        if self.redis_reconnect_interval < 0:
            raise ValueError(
                "REDIS_RECONNECT_INTERVAL must not be negative, got: "
                f"{self.redis_reconnect_interval}"
            )
        if self.cache_max_body_bytes <= 0:
            raise ValueError(
                f"CACHE_MAX_BODY_BYTES must be positive, got: {self.cache_max_body_bytes}"
            )
        if not self.cache_force_param.strip():
            raise ValueError("CACHE_FORCE_PARAM must not be empty")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
