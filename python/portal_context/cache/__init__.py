"""Response caching: strategy factory, behaviors and persistence tiers."""

from portal_context.cache.factory import (
    CacheBehavior,
    CacheStrategyFactory,
    normalize_cache_key,
)
from portal_context.cache.stores import (
    FileCacheStore,
    MemoryCacheStore,
    default_storage_directory,
)

__all__ = [
    "CacheBehavior",
    "CacheStrategyFactory",
    "normalize_cache_key",
    "MemoryCacheStore",
    "FileCacheStore",
    "default_storage_directory",
]
