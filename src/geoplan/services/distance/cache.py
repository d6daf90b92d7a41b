"""Time- and size-bounded cache of distance results."""

from __future__ import annotations

import logging
import time
from typing import Callable

from ...config import settings
from ...models.domain import CacheEntry, DistanceResult
from ...persistence.cache_store import CacheStore, MemoryCacheStore

logger = logging.getLogger(__name__)


def cache_key(origin: str, destination: str) -> str:
    """Directional key: origin→destination differs from destination→origin."""

    return f"{origin}→{destination}"


class GeoCache:
    """Distance results keyed by ordered (origin, destination) address pairs.

    Entries expire ``ttl_seconds`` after they were stored. When full, the
    earliest-inserted entry is evicted (insertion order, not access order).
    Every ``put`` is written through to the durable store.
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else MemoryCacheStore()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        self.max_entries = max_entries if max_entries is not None else settings.cache_max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hydrate()

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.ttl_seconds

    def _hydrate(self) -> None:
        now = self._clock()
        dropped: list[str] = []
        for key, payload in self.store.load():
            try:
                entry = CacheEntry.from_dict(payload)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable cache entry '{key}': {e}")
                dropped.append(key)
                continue
            if not self._is_fresh(entry, now):
                dropped.append(key)
                continue
            self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            dropped.append(oldest)
        if dropped:
            self.store.prune(dropped)
        if self._entries or dropped:
            logger.info(f"Loaded {len(self._entries)} cached distances ({len(dropped)} expired or invalid dropped)")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, origin: str, destination: str) -> DistanceResult | None:
        key = cache_key(origin, destination)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_fresh(entry, self._clock()):
            return entry.result
        del self._entries[key]
        self.store.remove(key)
        return None

    def put(self, origin: str, destination: str, result: DistanceResult) -> None:
        key = cache_key(origin, destination)
        now = self._clock()
        self._purge_expired(now)
        if key not in self._entries and len(self._entries) >= self.max_entries:
            evicted = next(iter(self._entries))
            del self._entries[evicted]
            self.store.remove(evicted)
            logger.debug(f"Distance cache full, evicted '{evicted}'")
        entry = CacheEntry(result=result, stored_at=now)
        self._entries[key] = entry
        self.store.write(key, entry.to_dict())

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self.store.prune(expired)

    def clear(self) -> None:
        self._entries.clear()
        self.store.clear()
