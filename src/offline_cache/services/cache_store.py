"""Partitioned cache store.

Binds a CacheStorage backend to the current version's three partitions.
Every storage call is guarded: a failing backend degrades to "not found"
or "not persisted" instead of breaking the request being served.
"""

import logging
import time

from offline_cache.config import CacheConfig
from offline_cache.entities import CachedResponse, PartitionKind, ResourceRequest
from offline_cache.exceptions import StorageError
from offline_cache.protocols import CacheStorage

logger = logging.getLogger(__name__)


class CacheStore:
    """Cache operations over the static, dynamic and image partitions.

    Example:
        ```python
        store = CacheStore(config=CacheConfig(), storage=MemoryCacheRepository())
        await store.write(PartitionKind.STATIC, request, response)
        cached = await store.find(request)
        ```
    """

    def __init__(self, config: CacheConfig, storage: CacheStorage) -> None:
        """Initialize the cache store.

        Args:
            config: Cache configuration (partition names, version).
            storage: Partitioned storage backend (required).
        """
        self._config = config
        self._storage = storage

    def name_of(self, kind: PartitionKind) -> str:
        return self._config.partition_name(kind)

    async def open(self, kind: PartitionKind) -> str:
        """Open a partition, creating it if absent. Idempotent."""
        return await self._storage.open(self.name_of(kind))

    async def match(self, kind: PartitionKind, request: ResourceRequest) -> CachedResponse | None:
        """Look up a request in a single partition.

        Storage failures are logged and reported as a miss.
        """
        try:
            return await self._storage.match(self.name_of(kind), request.cache_key)
        except StorageError as e:
            logger.warning("Error searching cache %s: %s", self.name_of(kind), e)
            return None

    async def find(self, request: ResourceRequest) -> CachedResponse | None:
        """Search the static, dynamic and image partitions in that order.

        Args:
            request: The request to look up

        Returns:
            The first cached response found, or None
        """
        if request.method != "GET":
            return None
        for kind in (PartitionKind.STATIC, PartitionKind.DYNAMIC, PartitionKind.IMAGE):
            response = await self.match(kind, request)
            if response is not None:
                return response
        return None

    async def write(self, kind: PartitionKind, request: ResourceRequest, response: CachedResponse) -> bool:
        """Store a response, replacing any entry for the same request.

        Only successful (2xx) responses to GET requests are stored.

        Args:
            kind: Target partition
            request: The request the response answers
            response: The response to store

        Returns:
            True if the response was persisted
        """
        if request.method != "GET" or not response.ok:
            return False

        try:
            await self._storage.put(self.name_of(kind), request.cache_key, response.stamped(time.time()))
        except StorageError as e:
            logger.error("Failed to cache %s in %s: %s", request.url, self.name_of(kind), e)
            return False

        logger.debug("Cached %s in %s", request.url, self.name_of(kind))
        return True

    async def delete(self, kind: PartitionKind, key: str) -> bool:
        try:
            return await self._storage.delete(self.name_of(kind), key)
        except StorageError as e:
            logger.warning("Failed to delete %s from %s: %s", key, self.name_of(kind), e)
            return False

    async def entry(self, kind: PartitionKind, key: str) -> CachedResponse | None:
        """Read an entry by its storage key."""
        try:
            return await self._storage.match(self.name_of(kind), key)
        except StorageError as e:
            logger.warning("Error reading %s from %s: %s", key, self.name_of(kind), e)
            return None

    async def list_entries(self, kind: PartitionKind) -> list[str]:
        """List entry keys of a partition, oldest inserted first."""
        try:
            return await self._storage.keys(self.name_of(kind))
        except StorageError as e:
            logger.warning("Failed to list entries of %s: %s", self.name_of(kind), e)
            return []

    async def list_partition_names(self) -> set[str]:
        """List every partition in the backend, including other applications'.

        Raises:
            StorageError: If the backend cannot be enumerated
        """
        return await self._storage.partition_names()

    async def delete_partition(self, name: str) -> bool:
        """Delete a partition by its full name.

        Raises:
            StorageError: If the backend rejects the deletion
        """
        return await self._storage.delete_partition(name)

    async def stats(self) -> dict[str, int]:
        """Entry count per current partition."""
        return {self.name_of(kind): len(await self.list_entries(kind)) for kind in PartitionKind}

    async def is_healthy(self) -> bool:
        return await self._storage.health_check()
