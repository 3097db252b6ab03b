"""Configuration models for the context runtime.

ContextConfig is a BaseSettings so every field can also come from the
environment (PORTAL_CONTEXT_HTTP__TIMEOUT=5000) or a .env file. Nested
sections are closed pydantic models; every field is defaulted here, at
construction time, so downstream code never needs `a or b or c` chains.

Durations are milliseconds.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portal_context.config.constants import (
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_COMPONENT_NAME,
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT_MS,
    MAX_HTTP_RETRIES,
)
from portal_context.protocols import CacheStrategy, LogLevel


class LoggingConfig(BaseModel):
    """Logging section. `level=None` means "derive from environment"."""

    model_config = ConfigDict(extra="forbid")

    level: Optional[LogLevel] = None
    enable_console: bool = True
    enable_performance: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> Optional[LogLevel]:
        if v is None or v == "":
            return None
        return LogLevel.parse(v)


class HttpConfig(BaseModel):
    """HTTP transport section."""

    model_config = ConfigDict(extra="forbid")

    timeout: int = Field(default=DEFAULT_HTTP_TIMEOUT_MS, ge=1)
    retries: int = Field(default=DEFAULT_HTTP_RETRIES, ge=0, le=MAX_HTTP_RETRIES)
    enable_auth: bool = True


class CacheConfig(BaseModel):
    """Cache section for the primary context."""

    model_config = ConfigDict(extra="forbid")

    strategy: CacheStrategy = CacheStrategy.NONE
    ttl: int = Field(default=DEFAULT_CACHE_TTL_MS, ge=0)


class ContextConfig(BaseSettings):
    """Top-level configuration surface for ContextManager.initialize()."""

    component_name: str = DEFAULT_COMPONENT_NAME
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_CONTEXT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# =============================================================================
# Per-site configuration
# =============================================================================


class SiteCacheConfig(BaseModel):
    """Per-site cache override. `None` fields inherit from the primary."""

    model_config = ConfigDict(extra="forbid")

    strategy: Optional[CacheStrategy] = None
    ttl: Optional[int] = Field(default=None, ge=0)


class SiteLoggerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    prefix: Optional[str] = None


class SiteConfig(BaseModel):
    """Options for SiteConnectionRegistry.add()."""

    model_config = ConfigDict(extra="forbid")

    alias: Optional[str] = None
    cache: SiteCacheConfig = Field(default_factory=SiteCacheConfig)
    logger: SiteLoggerConfig = Field(default_factory=SiteLoggerConfig)

    @field_validator("alias")
    @classmethod
    def blank_alias_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


# =============================================================================
# Helpers
# =============================================================================


def coerce_context_config(
    config: Union[ContextConfig, Mapping[str, Any], None],
) -> ContextConfig:
    """Accept a ContextConfig, a plain mapping, or None."""
    if config is None:
        return ContextConfig()
    if isinstance(config, ContextConfig):
        return config
    return ContextConfig(**dict(config))


def coerce_site_config(
    config: Union[SiteConfig, Mapping[str, Any], None],
) -> SiteConfig:
    if config is None:
        return SiteConfig()
    if isinstance(config, SiteConfig):
        return config
    return SiteConfig.model_validate(dict(config))


def resolve_cache_config(
    site_override: Optional[SiteCacheConfig],
    primary: Optional[CacheConfig],
    default: CacheStrategy = CacheStrategy.NONE,
) -> CacheConfig:
    """Resolve the effective cache config for a connection.

    Precedence, per field: explicit per-site value > primary config >
    hardcoded default.
    """
    strategy = default
    ttl = DEFAULT_CACHE_TTL_MS
    if primary is not None:
        strategy = primary.strategy
        ttl = primary.ttl
    if site_override is not None:
        if site_override.strategy is not None:
            strategy = site_override.strategy
        if site_override.ttl is not None:
            ttl = site_override.ttl
    return CacheConfig(strategy=strategy, ttl=ttl)


__all__ = [
    "LoggingConfig",
    "HttpConfig",
    "CacheConfig",
    "ContextConfig",
    "SiteCacheConfig",
    "SiteLoggerConfig",
    "SiteConfig",
    "coerce_context_config",
    "coerce_site_config",
    "resolve_cache_config",
]
