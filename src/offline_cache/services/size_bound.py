"""Size and age bounds for the dynamic partition."""

import logging
import time

from offline_cache.entities import PartitionKind
from offline_cache.services.cache_store import CacheStore

logger = logging.getLogger(__name__)


class SizeBoundEnforcer:
    """Evicts entries from a partition, oldest inserted first.

    Concurrent writers may interleave with an eviction pass, so the bound
    is a soft target between passes rather than a hard invariant.
    """

    def __init__(self, cache_store: CacheStore) -> None:
        self._store = cache_store

    async def enforce(self, kind: PartitionKind, max_items: int) -> int:
        """Trim a partition to at most `max_items` entries.

        Args:
            kind: Partition to trim
            max_items: Maximum number of entries to keep

        Returns:
            Number of entries evicted
        """
        keys = await self._store.list_entries(kind)
        excess = len(keys) - max_items
        if excess <= 0:
            return 0

        evicted = 0
        for key in keys[:excess]:
            if await self._store.delete(kind, key):
                evicted += 1

        logger.info("Trimmed %s, removed %d old entries", self._store.name_of(kind), evicted)
        return evicted

    async def expire(self, kind: PartitionKind, max_age: int, now: float | None = None) -> int:
        """Evict entries stored more than `max_age` seconds ago.

        Args:
            kind: Partition to sweep
            max_age: Maximum entry age in seconds; 0 disables expiry
            now: Reference time (defaults to the current time)

        Returns:
            Number of entries evicted
        """
        if max_age <= 0:
            return 0

        cutoff = (now if now is not None else time.time()) - max_age
        evicted = 0
        for key in await self._store.list_entries(kind):
            entry = await self._store.entry(kind, key)
            # Entries are in insertion order, so the first fresh one ends the sweep
            if entry is None or entry.cached_at is None or entry.cached_at >= cutoff:
                break
            if await self._store.delete(kind, key):
                evicted += 1

        if evicted:
            logger.info("Expired %d entries from %s", evicted, self._store.name_of(kind))
        return evicted
