"""Durable stores backing the distance cache.

Entries are exchanged as ``(key, entry_dict)`` pairs where ``entry_dict`` is
``CacheEntry.to_dict()``. Store failures are logged and never propagate: a
cache that cannot persist still serves from memory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from ..config import settings
from ..db.supabase import get_supabase_client

logger = logging.getLogger(__name__)

CachePair = tuple[str, dict[str, Any]]


class CacheStore(Protocol):
    def load(self) -> list[CachePair]: ...

    def write(self, key: str, entry: dict[str, Any]) -> None: ...

    def remove(self, key: str) -> None: ...

    def prune(self, keys: list[str]) -> None: ...

    def clear(self) -> None: ...


class MemoryCacheStore:
    """In-process store, mainly for tests and short-lived scripts."""

    def __init__(self, pairs: list[CachePair] | None = None) -> None:
        self.rows: dict[str, dict[str, Any]] = dict(pairs or [])
        self.writes = 0

    def load(self) -> list[CachePair]:
        return list(self.rows.items())

    def write(self, key: str, entry: dict[str, Any]) -> None:
        self.rows[key] = entry
        self.writes += 1

    def remove(self, key: str) -> None:
        self.rows.pop(key, None)

    def prune(self, keys: list[str]) -> None:
        for key in keys:
            self.rows.pop(key, None)

    def clear(self) -> None:
        self.rows.clear()


class JsonFileCacheStore:
    """Single JSON blob holding a list of ``[key, entry]`` pairs.

    Every mutation rewrites the whole file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or settings.cache_path).resolve()
        self._rows: dict[str, dict[str, Any]] | None = None

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read distance cache from {self.path}: {e}")
            return {}
        if not isinstance(payload, list):
            logger.error(f"Ignoring distance cache at {self.path}: expected a list of pairs")
            return {}
        rows: dict[str, dict[str, Any]] = {}
        for item in payload:
            if isinstance(item, list) and len(item) == 2 and isinstance(item[1], dict):
                rows[str(item[0])] = item[1]
        return rows

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump([[key, entry] for key, entry in self._rows_view().items()], handle, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to save distance cache to {self.path}: {e}")

    def _rows_view(self) -> dict[str, dict[str, Any]]:
        if self._rows is None:
            self._rows = self._read()
        return self._rows

    def load(self) -> list[CachePair]:
        self._rows = self._read()
        return list(self._rows.items())

    def write(self, key: str, entry: dict[str, Any]) -> None:
        self._rows_view()[key] = entry
        self._flush()

    def remove(self, key: str) -> None:
        rows = self._rows_view()
        if key in rows:
            del rows[key]
            self._flush()

    def prune(self, keys: list[str]) -> None:
        rows = self._rows_view()
        present = [key for key in keys if key in rows]
        for key in present:
            del rows[key]
        if present:
            self._flush()

    def clear(self) -> None:
        self._rows = {}
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete distance cache {self.path}: {e}")


class SupabaseCacheStore:
    """One row per cache key in a Supabase table.

    Expected columns: ``storage_key`` (text), ``cache_key`` (text) and
    ``payload`` (jsonb), unique on ``(storage_key, cache_key)``.
    """

    def __init__(self, client: Any, table: str | None = None, storage_key: str | None = None) -> None:
        self.client = client
        self.table = table or settings.cache_table
        self.storage_key = storage_key or settings.cache_storage_key

    def load(self) -> list[CachePair]:
        try:
            response = (
                self.client.table(self.table)
                .select("cache_key, payload")
                .eq("storage_key", self.storage_key)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Failed to load distance cache from Supabase table '{self.table}': {e}")
            return []
        return [(row["cache_key"], row["payload"]) for row in (response.data or [])]

    def write(self, key: str, entry: dict[str, Any]) -> None:
        try:
            self.client.table(self.table).upsert(
                {"storage_key": self.storage_key, "cache_key": key, "payload": entry},
                on_conflict="storage_key,cache_key",
            ).execute()
        except Exception as e:
            logger.warning(f"Failed to write distance cache entry '{key}' to Supabase: {e}")

    def remove(self, key: str) -> None:
        try:
            (
                self.client.table(self.table)
                .delete()
                .eq("storage_key", self.storage_key)
                .eq("cache_key", key)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Failed to delete distance cache entry '{key}' from Supabase: {e}")

    def prune(self, keys: list[str]) -> None:
        if not keys:
            return
        try:
            (
                self.client.table(self.table)
                .delete()
                .eq("storage_key", self.storage_key)
                .in_("cache_key", keys)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Failed to prune {len(keys)} distance cache entries from Supabase: {e}")

    def clear(self) -> None:
        try:
            self.client.table(self.table).delete().eq("storage_key", self.storage_key).execute()
        except Exception as e:
            logger.warning(f"Failed to clear distance cache in Supabase: {e}")


def build_cache_store() -> CacheStore:
    """Create the store selected by ``settings.cache_backend``."""

    backend = settings.cache_backend
    if backend == "memory":
        return MemoryCacheStore()
    if backend == "supabase":
        client = get_supabase_client()
        if client is not None:
            return SupabaseCacheStore(client)
        logger.warning("Supabase cache backend selected but not configured - using the JSON file store")
    return JsonFileCacheStore()
