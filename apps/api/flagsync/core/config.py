"""
Application configuration using Pydantic Settings.
"""

from typing import Any
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureSettings(BaseSettings):
    """Canonical feature definition store and SDK endpoint configuration."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    backend: str = Field(
        default="memory",
        description="Definition store backend: memory",
    )
    seed_file: str | None = Field(
        default=None,
        description="JSON document loaded into the memory store on startup",
    )
    cache_max_age: int = Field(
        default=30,
        ge=0,
        description="Cache-Control max-age for SDK payload responses (seconds)",
    )


class SDKCacheSettings(BaseSettings):
    """Client-side feature repository cache configuration."""

    model_config = SettingsConfigDict(env_prefix="SDK_CACHE_")

    ttl: int = Field(
        default=60,
        ge=0,
        description="Seconds before a cached payload is refreshed in the background",
    )
    storage_key: str = Field(
        default="growthbook:cache:features",
        description="Durable slot holding the serialized cache",
    )
    storage_backend: str = Field(
        default="memory",
        description="Persistent storage: memory, file, redis",
    )
    file_path: str = Field(default="./.flagsync")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_prefix: str = Field(default="")
    fetch_timeout: float = Field(default=10.0, gt=0)

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        allowed = {"memory", "file", "redis"}
        if v not in allowed:
            raise ValueError(f"storage_backend must be one of {allowed}")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="flagsync")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    workers: int = Field(default=1)
    reload: bool = Field(default=False)

    # CORS
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    features: FeatureSettings = Field(default_factory=FeatureSettings)
    sdk_cache: SDKCacheSettings = Field(default_factory=SDKCacheSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError("log_format must be json or text")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def get_storage_config(self) -> dict[str, Any]:
        """Get persistent storage configuration for the SDK cache."""
        return {
            "backend": self.sdk_cache.storage_backend,
            "file": {"base_path": self.sdk_cache.file_path},
            "redis": {
                "redis_url": self.sdk_cache.redis_url,
                "prefix": self.sdk_cache.redis_prefix,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
