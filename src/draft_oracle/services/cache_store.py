"""Namespaced, versioned TTL cache over a pluggable key-value store."""

import logging
import time
from typing import Any, Callable, Optional, TypeVar

from draft_oracle.models.cache import CacheEntry
from draft_oracle.repositories.key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    StorageError,
    StorageFullError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# Preset TTLs in milliseconds
TTL = {
    "FIVE_MINUTES": 5 * MINUTE_MS,
    "THIRTY_MINUTES": 30 * MINUTE_MS,
    "ONE_HOUR": HOUR_MS,
    "SIX_HOURS": 6 * HOUR_MS,
    "ONE_DAY": DAY_MS,
    "ONE_WEEK": 7 * DAY_MS,
}

DEFAULT_TTL_MS = HOUR_MS
DEFAULT_VERSION = "1.0"
DEFAULT_NAMESPACE = "default"
DEFAULT_SWEEP_INTERVAL_MS = 5 * MINUTE_MS
DEFAULT_EVICT_BATCH = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


class CacheStore:
    """TTL/versioned cache. A read never raises; anything unusable is a miss.

    Args:
        store: Backend holding serialized entries (in-memory if omitted)
        clock: Returns the current time in epoch milliseconds
        default_ttl: TTL used when neither the call nor the entry supplies one
        sweep_interval: Minimum milliseconds between automatic expiry sweeps
        evict_batch: How many of the oldest entries to drop when the store is full
    """

    KEY_PREFIX = "cache:"

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], int] = _now_ms,
        default_ttl: int = DEFAULT_TTL_MS,
        sweep_interval: int = DEFAULT_SWEEP_INTERVAL_MS,
        evict_batch: int = DEFAULT_EVICT_BATCH,
    ):
        self.store = store if store is not None else InMemoryKeyValueStore()
        self.clock = clock
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self.evict_batch = evict_batch
        self._last_sweep: Optional[int] = None

    def build_key(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> str:
        return f"{self.KEY_PREFIX}{namespace}:{key}"

    def get(
        self,
        key: str,
        *,
        version: str = DEFAULT_VERSION,
        namespace: str = DEFAULT_NAMESPACE,
        ttl: Optional[int] = None,
    ) -> Any:
        """Get cached data, or None on a miss.

        Expired, version-mismatched and corrupted entries are removed and
        reported as misses.
        """
        self.maybe_sweep()
        full_key = self.build_key(key, namespace)

        try:
            raw = self.store.get(full_key)
        except StorageError as e:
            logger.error(f"[Cache] Error reading {full_key}: {e}")
            return None

        if raw is None:
            logger.debug(f"[Cache] MISS: {full_key}")
            return None

        now = self.clock()
        try:
            entry = CacheEntry.deserialize(raw, key, namespace, self.default_ttl)
        except ValueError as e:
            logger.warning(f"[Cache] Corrupted entry {full_key}: {e}")
            self._safe_remove(full_key)
            return None

        if entry.is_expired(now, ttl):
            logger.debug(f"[Cache] EXPIRED: {full_key} (age: {entry.age(now)}ms, ttl: {entry.ttl if ttl is None else ttl}ms)")
            self._safe_remove(full_key)
            return None

        if entry.version != version:
            logger.debug(f"[Cache] VERSION_MISMATCH: {full_key} (expected: {version}, got: {entry.version})")
            self._safe_remove(full_key)
            return None

        logger.debug(f"[Cache] HIT: {full_key} (age: {entry.age(now)}ms)")
        return entry.data

    def set(
        self,
        key: str,
        data: Any,
        *,
        version: str = DEFAULT_VERSION,
        namespace: str = DEFAULT_NAMESPACE,
        ttl: Optional[int] = None,
    ) -> bool:
        """Write a new entry. Returns False if the write was dropped.

        A full store triggers one eviction of the oldest entries and a single
        retry. Data must be JSON-serializable.
        """
        full_key = self.build_key(key, namespace)
        entry = CacheEntry(
            key=key,
            namespace=namespace,
            version=version,
            timestamp=self.clock(),
            ttl=self.default_ttl if ttl is None else ttl,
            data=data,
        )
        try:
            raw = entry.serialize()
        except (TypeError, ValueError) as e:
            logger.error(f"[Cache] Cannot serialize {full_key}: {e}")
            return False

        try:
            self.store.set(full_key, raw)
            logger.debug(f"[Cache] SET: {full_key} (ttl: {entry.ttl}ms)")
            return True
        except StorageFullError:
            logger.warning("[Cache] Quota exceeded, evicting old entries...")
        except StorageError as e:
            logger.error(f"[Cache] Error setting {full_key}: {e}")
            return False

        self.evict_oldest(self.evict_batch)
        try:
            self.store.set(full_key, raw)
            logger.debug(f"[Cache] SET after eviction: {full_key}")
            return True
        except StorageError as e:
            logger.warning(f"[Cache] Dropping write for {full_key} even after eviction: {e}")
            return False

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], T],
        *,
        version: str = DEFAULT_VERSION,
        namespace: str = DEFAULT_NAMESPACE,
        ttl: Optional[int] = None,
    ) -> T:
        """Return the cached value or compute, store and return a fresh one."""
        cached = self.get(key, version=version, namespace=namespace, ttl=ttl)
        if cached is not None:
            return cached
        value = compute()
        self.set(key, value, version=version, namespace=namespace, ttl=ttl)
        return value

    def remove(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> None:
        full_key = self.build_key(key, namespace)
        self._safe_remove(full_key)
        logger.debug(f"[Cache] REMOVE: {full_key}")

    def clear_namespace(self, namespace: str) -> int:
        """Remove every entry in a namespace. Returns the number removed."""
        prefix = self.build_key("", namespace)
        removed = 0
        for full_key, _ in self._scan(prefix):
            if self._safe_remove(full_key):
                removed += 1
        logger.debug(f"[Cache] CLEAR_NAMESPACE: {namespace} ({removed} items)")
        return removed

    def evict_expired(self) -> int:
        """Remove expired and corrupted entries across all namespaces."""
        now = self.clock()
        self._last_sweep = now
        stale: list[str] = []
        for full_key, raw in self._scan(self.KEY_PREFIX):
            try:
                entry = CacheEntry.deserialize(raw, full_key, "", self.default_ttl)
            except ValueError:
                logger.warning(f"[Cache] Corrupted cache entry: {full_key}")
                stale.append(full_key)
                continue
            if entry.is_expired(now):
                stale.append(full_key)

        evicted = sum(1 for full_key in stale if self._safe_remove(full_key))
        if evicted:
            logger.debug(f"[Cache] EVICTED: {evicted} expired entries")
        return evicted

    def maybe_sweep(self) -> int:
        """Run evict_expired() if the sweep interval has elapsed."""
        now = self.clock()
        if self._last_sweep is not None and now - self._last_sweep < self.sweep_interval:
            return 0
        return self.evict_expired()

    def evict_oldest(self, count: int) -> int:
        """Remove the `count` oldest entries by write time (corrupted ones first)."""
        entries: list[tuple[int, str]] = []
        for full_key, raw in self._scan(self.KEY_PREFIX):
            try:
                entry = CacheEntry.deserialize(raw, full_key, "", self.default_ttl)
                entries.append((entry.timestamp, full_key))
            except ValueError:
                entries.append((0, full_key))

        entries.sort()
        evicted = sum(1 for _, full_key in entries[:count] if self._safe_remove(full_key))
        logger.debug(f"[Cache] EVICT_OLDEST: {evicted} items")
        return evicted

    def get_stats(self) -> dict:
        """Entry count, total serialized size and oldest/newest write times."""
        count = 0
        total_size = 0
        oldest: Optional[int] = None
        newest: Optional[int] = None
        for full_key, raw in self._scan(self.KEY_PREFIX):
            count += 1
            total_size += len(raw)
            try:
                entry = CacheEntry.deserialize(raw, full_key, "", self.default_ttl)
            except ValueError:
                continue
            oldest = entry.timestamp if oldest is None else min(oldest, entry.timestamp)
            newest = entry.timestamp if newest is None else max(newest, entry.timestamp)
        return {"count": count, "total_size": total_size, "oldest_entry": oldest, "newest_entry": newest}

    def _scan(self, prefix: str) -> list[tuple[str, str]]:
        try:
            return list(self.store.iterate(prefix))
        except StorageError as e:
            logger.error(f"[Cache] Failed to scan {prefix!r}: {e}")
            return []

    def _safe_remove(self, full_key: str) -> bool:
        try:
            self.store.remove(full_key)
            return True
        except StorageError as e:
            logger.error(f"[Cache] Failed to remove {full_key}: {e}")
            return False
