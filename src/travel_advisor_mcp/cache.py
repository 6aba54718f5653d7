"""Bounding-box cache for places responses, persisted through a key-value store."""

import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable

from pydantic import ValidationError

from travel_advisor_mcp.models import (
    Bounds,
    CacheEntry,
    CacheStats,
    QueryType,
    StoredCacheItem,
    query_type_value,
)
from travel_advisor_mcp.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "travelAdvisor_apiCache"


class BoundsCache:
    """TTL cache keyed by (query type, bounding box).

    A lookup hits when the requested box lies inside a fresh cached box of
    the same type. Entries are evicted oldest-inserted first; reads do not
    refresh an entry's position.
    """

    def __init__(
        self,
        store: KeyValueStore,
        max_size: int = 10,
        ttl_ms: int = 5 * 60 * 1000,
        expansion_factor: float = 0.5,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if ttl_ms < 1:
            raise ValueError("ttl_ms must be >= 1")
        self._store = store
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_size = max_size
        self._ttl_ms = ttl_ms
        self._expansion_factor = expansion_factor
        self._storage_key = storage_key
        self._clock = clock
        self._load()

    def _now_ms(self) -> int:
        return round(self._clock() * 1000)

    def _is_fresh(self, entry: CacheEntry, now: int) -> bool:
        return now - entry.timestamp < self._ttl_ms

    def _load(self) -> None:
        try:
            raw = self._store.get_item(self._storage_key)
            if raw is None:
                return
            items = [StoredCacheItem.model_validate(item) for item in json.loads(raw)]
        except (StorageError, ValueError, TypeError, ValidationError) as exc:
            logger.error("Discarding unreadable cache state: %s", exc)
            self._entries.clear()
            self._remove_persisted()
            return

        now = self._now_ms()
        for item in items:
            if self._is_fresh(item.entry, now):
                self._entries[item.key] = item.entry
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)
        if self._entries:
            logger.info("Loaded %d cached entries from storage", len(self._entries))

    def _save(self) -> None:
        payload = [
            StoredCacheItem(key=key, entry=entry).model_dump(by_alias=True)
            for key, entry in self._entries.items()
        ]
        try:
            self._store.set_item(self._storage_key, json.dumps(payload))
        except StorageError as exc:
            logger.error("Failed to persist cache, clearing it: %s", exc)
            self.clear()

    def _remove_persisted(self) -> None:
        try:
            self._store.remove_item(self._storage_key)
        except StorageError as exc:
            logger.warning("Failed to remove persisted cache: %s", exc)

    @staticmethod
    def generate_key(query_type: QueryType | str, bounds: Bounds) -> str:
        """Build a cache key with coordinates rounded to two decimals."""
        return (
            f"{query_type_value(query_type)}"
            f"_{bounds.sw.lat:.2f}_{bounds.sw.lng:.2f}"
            f"_{bounds.ne.lat:.2f}_{bounds.ne.lng:.2f}"
        )

    def get(self, query_type: QueryType | str, bounds: Bounds) -> list[Any] | None:
        type_value = query_type_value(query_type)
        now = self._now_ms()
        for key, entry in list(self._entries.items()):
            if entry.query_type != type_value:
                continue
            if not self._is_fresh(entry, now):
                del self._entries[key]
                continue
            if entry.bounds.contains(bounds):
                logger.info("Cache hit for %s (%s)", type_value, key)
                return entry.data
        logger.info("Cache miss for %s", type_value)
        return None

    def set(self, query_type: QueryType | str, bounds: Bounds, data: list[Any]) -> None:
        type_value = query_type_value(query_type)
        expanded = bounds.expand(self._expansion_factor)
        key = self.generate_key(type_value, expanded)

        self._entries.pop(key, None)
        if len(self._entries) >= self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.info("Cache full, evicted oldest entry %s", evicted)

        self._entries[key] = CacheEntry(
            query_type=type_value,
            bounds=expanded,
            data=list(data),
            timestamp=self._now_ms(),
        )
        self._save()
        logger.debug("Cached %d %s for expanded area %s", len(data), type_value, key)

    def clear(self) -> None:
        self._entries.clear()
        self._remove_persisted()
        logger.info("Cache cleared")

    def get_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self._max_size,
            entries=list(self._entries.keys()),
        )

    def __len__(self) -> int:
        return len(self._entries)
