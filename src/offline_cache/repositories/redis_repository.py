"""Redis implementation of CacheStorage.

This repository keeps every partition durable in Redis so cached
responses survive process restarts. It's the default implementation and
satisfies the CacheStorage protocol.

Layout per partition (all keys under the configured namespace):
- `{ns}:partitions`           set of partition names
- `{ns}:{name}:entries`       hash of request key -> serialized response
- `{ns}:{name}:order`         sorted set of request keys scored by insertion sequence
- `{ns}:{name}:seq`           insertion sequence counter
"""

import base64
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis.asyncio as redis
from redis.exceptions import RedisError

from offline_cache.config import Settings, get_redis_client, get_settings
from offline_cache.entities import CachedResponse
from offline_cache.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except RedisError as e:
        raise StorageUnavailableError(f"Redis {operation} failed: {e}") from e


class RedisCacheRepository:
    """Redis implementation of partitioned cache storage.

    This class satisfies the CacheStorage protocol through structural
    typing - no explicit inheritance needed.

    Entry writes run in a MULTI/EXEC pipeline so the entry hash and the
    insertion order index never disagree for a single key.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: asyncio Redis client. If None, creates default.
            namespace: Key namespace shared by all partitions.
            settings: Settings used for defaults. If None, uses get_settings().
        """
        settings = settings or get_settings()
        self._client = redis_client or get_redis_client(settings)
        self._namespace = namespace or settings.cache_namespace

    @classmethod
    def create(
        cls,
        namespace: str | None = None,
        settings: Settings | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            namespace: Key namespace. If None, uses settings.
            settings: Settings instance. If None, uses get_settings().

        Returns:
            Configured RedisCacheRepository
        """
        return cls(namespace=namespace, settings=settings)

    def _registry_key(self) -> str:
        return f"{self._namespace}:partitions"

    def _entries_key(self, partition: str) -> str:
        return f"{self._namespace}:{partition}:entries"

    def _order_key(self, partition: str) -> str:
        return f"{self._namespace}:{partition}:order"

    def _seq_key(self, partition: str) -> str:
        return f"{self._namespace}:{partition}:seq"

    @staticmethod
    def _encode(response: CachedResponse) -> str:
        return json.dumps(
            {
                "status": response.status,
                "headers": response.headers,
                "body": base64.b64encode(response.body).decode("ascii"),
                "url": response.url,
                "reason": response.reason,
                "cached_at": response.cached_at,
            }
        )

    @staticmethod
    def _decode(raw: bytes | str) -> CachedResponse:
        data = json.loads(raw)
        return CachedResponse(
            status=int(data["status"]),
            headers=data.get("headers") or {},
            body=base64.b64decode(data.get("body", "")),
            url=data.get("url", ""),
            reason=data.get("reason", ""),
            cached_at=data.get("cached_at"),
        )

    async def open(self, partition: str) -> str:
        with _storage_errors("open"):
            await self._client.sadd(self._registry_key(), partition)
        return partition

    async def match(self, partition: str, key: str) -> CachedResponse | None:
        with _storage_errors("match"):
            raw = await self._client.hget(self._entries_key(partition), key)
        if raw is None:
            return None
        try:
            return self._decode(raw)
        except (ValueError, KeyError) as e:
            logger.warning("Discarding unreadable entry %s in %s: %s", key, partition, e)
            return None

    async def put(self, partition: str, key: str, response: CachedResponse) -> None:
        payload = self._encode(response)
        with _storage_errors("put"):
            seq = await self._client.incr(self._seq_key(partition))
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.sadd(self._registry_key(), partition)
                pipe.hset(self._entries_key(partition), key, payload)
                pipe.zadd(self._order_key(partition), {key: seq})
                await pipe.execute()

    async def delete(self, partition: str, key: str) -> bool:
        with _storage_errors("delete"):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hdel(self._entries_key(partition), key)
                pipe.zrem(self._order_key(partition), key)
                removed, _ = await pipe.execute()
        return removed > 0

    async def keys(self, partition: str) -> list[str]:
        with _storage_errors("keys"):
            members = await self._client.zrange(self._order_key(partition), 0, -1)
        return [m.decode() if isinstance(m, bytes) else m for m in members]

    async def delete_partition(self, partition: str) -> bool:
        with _storage_errors("delete_partition"):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(
                    self._entries_key(partition),
                    self._order_key(partition),
                    self._seq_key(partition),
                )
                pipe.srem(self._registry_key(), partition)
                _, removed = await pipe.execute()
        return removed > 0

    async def partition_names(self) -> set[str]:
        with _storage_errors("partition_names"):
            names = await self._client.smembers(self._registry_key())
        return {n.decode() if isinstance(n, bytes) else n for n in names}

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except Exception:
            return False

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
