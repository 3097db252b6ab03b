"""Unit tests for the cache factory, behaviors and stores.

Tests:
- normalize_cache_key (parameter order, case, non-URLs)
- create_behavior strategy mapping and TTL defaults
- CacheBehavior expiry and fetch (failures not cached)
- clear_cache only touches prefixed keys
- MemoryCacheStore.purge_expired
- FileCacheStore persistence and foreign files
"""

import json

import pytest

from portal_context.cache import (
    CacheBehavior,
    CacheStrategyFactory,
    FileCacheStore,
    MemoryCacheStore,
    normalize_cache_key,
)
from portal_context.protocols import CacheStrategy


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# =============================================================================
# Key normalization
# =============================================================================


class TestNormalizeCacheKey:
    def test_parameter_order_irrelevant(self):
        a = normalize_cache_key("https://h.example/_api/items?$top=5&$select=Id,Title")
        b = normalize_cache_key("https://h.example/_api/items?$select=Id,Title&$top=5")
        assert a == b

    def test_lowercased(self):
        assert normalize_cache_key("HTTPS://H.Example/Path?B=1") == "https://h.example/path?b=1"

    def test_no_query(self):
        assert normalize_cache_key("https://h.example/a/") == "https://h.example/a/"

    def test_blank_values_kept(self):
        assert normalize_cache_key("https://h/a?x=&y=1") == "https://h/a?x=&y=1"

    def test_non_url_lowercased(self):
        assert normalize_cache_key("Web/Lists") == "web/lists"


# =============================================================================
# Factory
# =============================================================================


class TestFactory:
    def test_none_yields_no_behavior(self):
        assert CacheStrategyFactory().create_behavior(CacheStrategy.NONE) is None

    def test_accepts_string_strategy(self):
        behavior = CacheStrategyFactory().create_behavior("memory", 1_000)
        assert behavior.strategy == CacheStrategy.MEMORY
        assert behavior.ttl_ms == 1_000

    def test_memory_and_pessimistic_share_memory_tier(self):
        factory = CacheStrategyFactory()

        memory = factory.create_behavior(CacheStrategy.MEMORY)
        pessimistic = factory.create_behavior(CacheStrategy.PESSIMISTIC)

        assert memory.store is factory.memory_store
        assert pessimistic.store is factory.memory_store

    def test_storage_uses_file_tier(self, isolated_cache_dir):
        factory = CacheStrategyFactory()

        behavior = factory.create_behavior(CacheStrategy.STORAGE)

        assert isinstance(behavior.store, FileCacheStore)
        assert behavior.store.directory == isolated_cache_dir

    @pytest.mark.parametrize("ttl", [None, 0])
    def test_default_ttl(self, ttl):
        factory = CacheStrategyFactory(default_ttl_ms=42_000)
        assert factory.create_behavior(CacheStrategy.MEMORY, ttl).ttl_ms == 42_000

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValueError):
            CacheStrategyFactory().create_behavior("forever")

    def test_clear_cache_only_touches_own_prefix(self, mock_logger):
        store = MemoryCacheStore()
        store.set("other-lib:key", {"value": 1, "expires_at_ms": 10**15})
        factory = CacheStrategyFactory(mock_logger, memory_store=store)
        behavior = factory.create_behavior(CacheStrategy.MEMORY)
        behavior.put("https://h/a", 1)
        behavior.put("https://h/b", 2)

        removed = factory.clear_cache()

        assert removed == 2
        assert store.keys() == ["other-lib:key"]

    def test_clear_cache_sweeps_file_tier_in_use(self, tmp_path):
        file_store = FileCacheStore(tmp_path)
        file_store.set("foreign", {"value": 0, "expires_at_ms": 10**15})
        factory = CacheStrategyFactory(storage_store=file_store)
        factory.create_behavior(CacheStrategy.STORAGE).put("https://h/a", 1)

        assert factory.clear_cache() == 1
        assert file_store.keys() == ["foreign"]

    def test_module_interface(self):
        factory = CacheStrategyFactory()

        exposed = factory.initialize(context=None, config={})

        assert factory.name == "cache"
        assert exposed["create_behavior"] == factory.create_behavior
        assert exposed["clear_cache"] == factory.clear_cache

    def test_cleanup_drops_memory_entries(self):
        factory = CacheStrategyFactory()
        factory.create_behavior(CacheStrategy.MEMORY).put("https://h/a", 1)

        factory.cleanup()

        assert factory.memory_store.keys() == []


# =============================================================================
# Behavior
# =============================================================================


class TestCacheBehavior:
    def _behavior(self, clock, ttl_ms=1_000):
        return CacheBehavior(
            strategy=CacheStrategy.MEMORY,
            store=MemoryCacheStore(),
            ttl_ms=ttl_ms,
            clock=clock,
        )

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        behavior = self._behavior(clock)
        behavior.put("https://h/a", {"v": 1})

        clock.now += 0.5
        assert behavior.lookup("https://h/a")["value"] == {"v": 1}

        clock.now += 0.6
        assert behavior.lookup("https://h/a") is None
        assert behavior.store.keys() == []

    def test_expiry_is_now_plus_ttl(self):
        clock = FakeClock(2.0)
        behavior = self._behavior(clock, ttl_ms=500)

        behavior.put("https://h/a", 1)

        entry = behavior.store.get(behavior.key_for("https://h/a"))
        assert entry["expires_at_ms"] == 2_500

    def test_lookup_uses_normalized_key(self):
        behavior = self._behavior(FakeClock())
        behavior.put("https://h/a?b=2&a=1", "x")

        assert behavior.lookup("https://H/a?a=1&b=2")["value"] == "x"

    def test_invalidate(self):
        behavior = self._behavior(FakeClock())
        behavior.put("https://h/a", 1)

        behavior.invalidate("https://h/a")

        assert behavior.lookup("https://h/a") is None

    async def test_fetch_loads_once(self):
        behavior = self._behavior(FakeClock())
        calls = []

        async def loader():
            calls.append(1)
            return {"n": len(calls)}

        first = await behavior.fetch("https://h/a", loader)
        second = await behavior.fetch("https://h/a", loader)

        assert first == second == {"n": 1}
        assert len(calls) == 1

    async def test_fetch_does_not_cache_failures(self):
        behavior = self._behavior(FakeClock())

        async def failing():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await behavior.fetch("https://h/a", failing)

        assert behavior.lookup("https://h/a") is None

    async def test_fetch_survives_unwritable_store(self, tmp_path, mock_logger):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        factory = CacheStrategyFactory(
            mock_logger, storage_store=FileCacheStore(blocker / "sub")
        )
        behavior = factory.create_behavior(CacheStrategy.STORAGE)

        async def loader():
            return {"Title": "Portal"}

        assert await behavior.fetch("https://h/web", loader) == {"Title": "Portal"}
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "cache_write_failed"


# =============================================================================
# Stores
# =============================================================================


class TestMemoryCacheStore:
    def test_purge_expired(self):
        store = MemoryCacheStore()
        store.set("old", {"value": 1, "expires_at_ms": 100})
        store.set("new", {"value": 2, "expires_at_ms": 300})

        assert store.purge_expired(now_ms=200) == 1
        assert store.keys() == ["new"]
        assert len(store) == 1

    def test_delete_missing_is_noop(self):
        MemoryCacheStore().delete("missing")


class TestFileCacheStore:
    def test_persists_across_instances(self, tmp_path):
        FileCacheStore(tmp_path).set("k", {"value": [1, 2], "expires_at_ms": 5})

        assert FileCacheStore(tmp_path).get("k") == {"value": [1, 2], "expires_at_ms": 5}

    def test_missing_key(self, tmp_path):
        assert FileCacheStore(tmp_path).get("absent") is None

    def test_keys_skip_foreign_files(self, tmp_path):
        store = FileCacheStore(tmp_path)
        store.set("mine", {"value": 1, "expires_at_ms": 5})
        (tmp_path / "garbage.json").write_text("not json", encoding="utf-8")
        (tmp_path / "other.json").write_text(json.dumps({"foo": 1}), encoding="utf-8")

        assert store.keys() == ["mine"]

    def test_delete(self, tmp_path):
        store = FileCacheStore(tmp_path)
        store.set("k", {"value": 1, "expires_at_ms": 5})

        store.delete("k")
        store.delete("k")

        assert store.get("k") is None

    def test_keys_without_directory(self, tmp_path):
        assert FileCacheStore(tmp_path / "missing").keys() == []
