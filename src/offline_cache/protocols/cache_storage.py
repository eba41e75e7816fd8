"""Cache storage protocol.

Defines the persistent key-value primitive the cache layer is built on:
independently named partitions, each holding request-key -> response
entries in insertion order.

Implementations can include:
- Redis (durable, default)
- In-process memory (tests, single-process deployments)
"""

from typing import Protocol, runtime_checkable

from offline_cache.entities import CachedResponse


@runtime_checkable
class CacheStorage(Protocol):
    """Protocol for partitioned cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations raise
    `offline_cache.exceptions.StorageError` subclasses on backend failure.

    Writes to a single key are atomic: a reader never observes a partially
    written entry. No cross-key transactions are provided.
    """

    async def open(self, partition: str) -> str:
        """Create the partition if absent.

        Args:
            partition: Partition name

        Returns:
            The partition name (usable as a handle)
        """
        ...

    async def match(self, partition: str, key: str) -> CachedResponse | None:
        """Look up an entry in one partition.

        Args:
            partition: Partition name
            key: Normalized request identity

        Returns:
            The stored response, or None
        """
        ...

    async def put(self, partition: str, key: str, response: CachedResponse) -> None:
        """Store an entry, replacing any existing one for the key.

        A replaced entry moves to the newest insertion position.

        Args:
            partition: Partition name (created if absent)
            key: Normalized request identity
            response: The response to store
        """
        ...

    async def delete(self, partition: str, key: str) -> bool:
        """Delete one entry.

        Returns:
            True if the entry existed
        """
        ...

    async def keys(self, partition: str) -> list[str]:
        """List entry keys, oldest inserted first."""
        ...

    async def delete_partition(self, partition: str) -> bool:
        """Delete a partition and all of its entries.

        Returns:
            True if the partition existed
        """
        ...

    async def partition_names(self) -> set[str]:
        """List the names of all existing partitions."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        ...
