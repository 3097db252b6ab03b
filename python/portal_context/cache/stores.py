"""Persistence tiers for cached API responses.

MemoryCacheStore  - ephemeral, lives as long as the process session
FileCacheStore    - durable across sessions, one JSON file per entry

Entries are dicts of the form {"value": <json>, "expires_at_ms": <int>}.
Stores are dumb: expiry is interpreted by CacheBehavior, except for
MemoryCacheStore.purge_expired() which sweeps on demand.
"""

from __future__ import annotations

import hashlib
import json
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class MemoryCacheStore:
    """Dict-backed store scoped to this process."""

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._entries.get(key)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._entries[key] = value

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._entries)

    def purge_expired(self, now_ms: Optional[int] = None) -> int:
        """Drop entries past their expiry. Returns the number removed."""
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.get("expires_at_ms", 0) <= now_ms
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MemoryCacheStore(entries={len(self._entries)})"


def default_storage_directory() -> Path:
    """Directory for the durable tier (override with PORTAL_CONTEXT_CACHE_DIR)."""
    override = os.environ.get("PORTAL_CONTEXT_CACHE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".cache" / "portal_context"


class FileCacheStore:
    """JSON-file store that survives process restarts.

    File names are hashes of the key; the key itself is stored inside the
    file so sweeps can recognise which entries belong to which owner.
    Files that are not ours (unparseable, or missing the key field) are
    ignored by keys().
    """

    def __init__(self, directory: Union[str, Path, None] = None) -> None:
        self._directory = Path(directory) if directory else default_storage_directory()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._directory / f"{digest}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path_for(key)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(raw, dict) or raw.get("key") != key:
            return None
        return raw.get("entry")

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"key": key, "entry": value}), encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass

    def keys(self) -> List[str]:
        if not self._directory.is_dir():
            return []
        found: List[str] = []
        for path in self._directory.glob("*.json"):
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                continue
            if isinstance(raw, dict) and isinstance(raw.get("key"), str):
                found.append(raw["key"])
        return found

    def __repr__(self) -> str:
        return f"FileCacheStore(directory={str(self._directory)!r})"


__all__ = [
    "MemoryCacheStore",
    "FileCacheStore",
    "default_storage_directory",
]
