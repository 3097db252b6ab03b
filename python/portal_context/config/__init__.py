"""Configuration package for portal_context.

Config ownership map:
  settings.py   - ContextConfig / SiteConfig models (env-overridable), cache precedence
  constants.py  - static operational constants (backoff, capacities, headers)
"""

from portal_context.config.constants import (
    BACKOFF_BASE_MS,
    BACKOFF_CAP_MS,
    BACKOFF_JITTER_MS,
    CACHE_KEY_PREFIX,
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_COMPONENT_NAME,
    LOG_HISTORY_CAPACITY,
    METRIC_HISTORY_CAPACITY,
    SLOW_OPERATION_THRESHOLD_MS,
)
from portal_context.config.settings import (
    CacheConfig,
    ContextConfig,
    HttpConfig,
    LoggingConfig,
    SiteCacheConfig,
    SiteConfig,
    SiteLoggerConfig,
    coerce_context_config,
    coerce_site_config,
    resolve_cache_config,
)

__all__ = [
    # Constants
    "BACKOFF_BASE_MS",
    "BACKOFF_CAP_MS",
    "BACKOFF_JITTER_MS",
    "CACHE_KEY_PREFIX",
    "DEFAULT_CACHE_TTL_MS",
    "DEFAULT_COMPONENT_NAME",
    "LOG_HISTORY_CAPACITY",
    "METRIC_HISTORY_CAPACITY",
    "SLOW_OPERATION_THRESHOLD_MS",
    # Models
    "LoggingConfig",
    "HttpConfig",
    "CacheConfig",
    "ContextConfig",
    "SiteCacheConfig",
    "SiteLoggerConfig",
    "SiteConfig",
    # Helpers
    "coerce_context_config",
    "coerce_site_config",
    "resolve_cache_config",
]
