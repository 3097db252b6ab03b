"""CacheStrategyFactory - declarative strategy -> concrete cache behavior.

`memory` and `storage` are the same time-boxed cache and differ only in
the persistence tier. `pessimistic` is the same mechanism again; it is
attached to a separate client handle reserved for rarely-changing
reference data, so invalidation problems on hot-path data never touch
reference-data reads.

Usage:
    factory = CacheStrategyFactory(logger=logger)
    behavior = factory.create_behavior(CacheStrategy.MEMORY, ttl_ms=60_000)
    cached_client = client.using(behavior)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar, Union
from urllib.parse import parse_qsl, urlencode, urlsplit

from portal_context.cache.stores import FileCacheStore, MemoryCacheStore
from portal_context.config.constants import CACHE_KEY_PREFIX, DEFAULT_CACHE_TTL_MS
from portal_context.protocols import CacheStoreProtocol, CacheStrategy, LoggerProtocol

T = TypeVar("T")


def normalize_cache_key(url: str) -> str:
    """Normalize a request URL into a cache key.

    scheme + host + path + query parameters sorted lexicographically,
    all lowercased. Requests differing only in parameter order map to
    the same key.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url.lower()
    if not parts.scheme or not parts.netloc:
        return url.lower()

    params = sorted(parse_qsl(parts.query, keep_blank_values=True))
    query = urlencode(params)
    key = f"{parts.scheme}://{parts.netloc}{parts.path}"
    if query:
        key = f"{key}?{query}"
    return key.lower()


@dataclass
class CacheBehavior:
    """Time-boxed cache attached to an API client handle."""

    strategy: CacheStrategy
    store: CacheStoreProtocol
    ttl_ms: int
    key_prefix: str = CACHE_KEY_PREFIX
    clock: Callable[[], float] = field(default=time.time, repr=False)
    logger: Optional[LoggerProtocol] = field(default=None, repr=False)

    def key_for(self, url: str) -> str:
        return f"{self.key_prefix}{normalize_cache_key(url)}"

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def lookup(self, url: str) -> Optional[Dict[str, Any]]:
        """Return the live entry for `url`, dropping it if expired."""
        key = self.key_for(url)
        entry = self.store.get(key)
        if entry is None:
            return None
        if entry.get("expires_at_ms", 0) <= self._now_ms():
            self.store.delete(key)
            return None
        return entry

    def put(self, url: str, value: Any) -> None:
        self.store.set(
            self.key_for(url),
            {"value": value, "expires_at_ms": self._now_ms() + self.ttl_ms},
        )

    def invalidate(self, url: str) -> None:
        self.store.delete(self.key_for(url))

    async def fetch(self, url: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Serve `url` from cache, or await `loader()` and cache its result.

        Failures from the loader are not cached. A store that cannot be
        written only costs the cache; the loaded value is still returned.
        """
        entry = self.lookup(url)
        if entry is not None:
            return entry["value"]
        value = await loader()
        try:
            self.put(url, value)
        except OSError as e:
            if self.logger:
                self.logger.warning(
                    "cache_write_failed",
                    strategy=self.strategy.value,
                    store=repr(self.store),
                    error=str(e),
                )
        return value


class CacheStrategyFactory:
    """Maps cache strategies to behaviors; also usable as a context module.

    Args:
        logger: Logger for sweep diagnostics
        memory_store: Ephemeral tier (one per factory by default)
        storage_store: Durable tier (FileCacheStore created lazily)
        default_ttl_ms: TTL used when a strategy is requested without one
        key_prefix: Prefix marking this library's entries in shared tiers
    """

    name = "cache"

    def __init__(
        self,
        logger: Optional[LoggerProtocol] = None,
        *,
        memory_store: Optional[CacheStoreProtocol] = None,
        storage_store: Optional[CacheStoreProtocol] = None,
        default_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        key_prefix: str = CACHE_KEY_PREFIX,
    ):
        self._logger = logger
        self._memory_store = memory_store if memory_store is not None else MemoryCacheStore()
        self._storage_store = storage_store
        self._default_ttl_ms = default_ttl_ms
        self._key_prefix = key_prefix

    @property
    def memory_store(self) -> CacheStoreProtocol:
        return self._memory_store

    @property
    def storage_store(self) -> CacheStoreProtocol:
        if self._storage_store is None:
            self._storage_store = FileCacheStore()
        return self._storage_store

    def create_behavior(
        self,
        strategy: Union[CacheStrategy, str],
        ttl_ms: Optional[int] = None,
    ) -> Optional[CacheBehavior]:
        """Build a behavior for `strategy`; None means "use the uncached client"."""
        strategy = CacheStrategy(strategy)
        if strategy == CacheStrategy.NONE:
            return None

        store = self.storage_store if strategy == CacheStrategy.STORAGE else self._memory_store
        return CacheBehavior(
            strategy=strategy,
            store=store,
            ttl_ms=ttl_ms or self._default_ttl_ms,
            key_prefix=self._key_prefix,
            logger=self._logger,
        )

    def clear_cache(self) -> int:
        """Best-effort sweep of this library's entries in the tiers in use.

        Only keys carrying our prefix are deleted; shared tiers are never
        blanket-cleared. Returns the number of entries removed.
        """
        removed = 0
        tiers = [self._memory_store]
        if self._storage_store is not None:
            tiers.append(self._storage_store)

        for store in tiers:
            try:
                for key in store.keys():
                    if key.startswith(self._key_prefix):
                        store.delete(key)
                        removed += 1
            except OSError as e:
                if self._logger:
                    self._logger.warning("cache_clear_failed", store=repr(store), error=str(e))

        if self._logger:
            self._logger.debug("cache_cleared", removed=removed)
        return removed

    # ─── Context module interface ───

    def initialize(self, context: Any, config: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "create_behavior": self.create_behavior,
            "clear_cache": self.clear_cache,
        }

    def cleanup(self) -> None:
        """Drop the ephemeral tier; the durable tier is left for the next session."""
        for key in self._memory_store.keys():
            if key.startswith(self._key_prefix):
                self._memory_store.delete(key)

    def __repr__(self) -> str:
        return f"CacheStrategyFactory(default_ttl_ms={self._default_ttl_ms})"


__all__ = [
    "CacheBehavior",
    "CacheStrategyFactory",
    "normalize_cache_key",
]
