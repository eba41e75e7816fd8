"""In-memory implementation of CacheStorage.

Keeps partitions in process memory. Used for tests and for
single-process deployments that do not need entries to survive restarts.
"""

from collections import OrderedDict

from offline_cache.entities import CachedResponse
from offline_cache.exceptions import StorageQuotaExceededError


class MemoryCacheRepository:
    """Dictionary-backed partitioned storage.

    This class satisfies the CacheStorage protocol through structural
    typing. An optional `max_entries` quota across all partitions makes
    writes of new keys fail with StorageQuotaExceededError once reached.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self._partitions: dict[str, OrderedDict[str, CachedResponse]] = {}
        self._max_entries = max_entries

    def _total_entries(self) -> int:
        return sum(len(entries) for entries in self._partitions.values())

    async def open(self, partition: str) -> str:
        self._partitions.setdefault(partition, OrderedDict())
        return partition

    async def match(self, partition: str, key: str) -> CachedResponse | None:
        entries = self._partitions.get(partition)
        if entries is None:
            return None
        return entries.get(key)

    async def put(self, partition: str, key: str, response: CachedResponse) -> None:
        entries = self._partitions.setdefault(partition, OrderedDict())
        if (
            self._max_entries is not None
            and key not in entries
            and self._total_entries() >= self._max_entries
        ):
            raise StorageQuotaExceededError(f"Storage quota of {self._max_entries} entries exceeded")
        entries.pop(key, None)
        entries[key] = response

    async def delete(self, partition: str, key: str) -> bool:
        entries = self._partitions.get(partition)
        if entries is None or key not in entries:
            return False
        del entries[key]
        return True

    async def keys(self, partition: str) -> list[str]:
        return list(self._partitions.get(partition, ()))

    async def delete_partition(self, partition: str) -> bool:
        return self._partitions.pop(partition, None) is not None

    async def partition_names(self) -> set[str]:
        return set(self._partitions)

    async def health_check(self) -> bool:
        return True
