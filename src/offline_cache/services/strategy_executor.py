"""Caching strategies.

Each strategy composes cache reads, a network fetch and a write-through
of successful responses. Failures propagate as NetworkFetchError; retry
and fallback belong to the caller.
"""

import asyncio
import logging

from offline_cache.config import CacheConfig
from offline_cache.entities import CachedResponse, PartitionKind, ResourceRequest, Strategy
from offline_cache.exceptions import NetworkFetchError
from offline_cache.protocols import NetworkFetcher
from offline_cache.services.cache_store import CacheStore
from offline_cache.services.classifier import ResourceClassifier
from offline_cache.services.size_bound import SizeBoundEnforcer

logger = logging.getLogger(__name__)


class StrategyExecutor:
    """Executes cache-first, network-first and stale-while-revalidate.

    Example:
        ```python
        executor = StrategyExecutor(config, store, fetcher, classifier, enforcer)
        response = await executor.execute(request, Strategy.CACHE_FIRST)
        ```
    """

    def __init__(
        self,
        config: CacheConfig,
        cache_store: CacheStore,
        fetcher: NetworkFetcher,
        classifier: ResourceClassifier,
        enforcer: SizeBoundEnforcer,
    ) -> None:
        self._config = config
        self._store = cache_store
        self._fetcher = fetcher
        self._classifier = classifier
        self._enforcer = enforcer
        # Revalidation tasks are detached; references are held only until they finish
        self._background: set[asyncio.Task] = set()

    async def execute(self, request: ResourceRequest, strategy: Strategy) -> CachedResponse:
        """Serve a request with the given strategy.

        Raises:
            NetworkFetchError: If the strategy could not produce a response
        """
        if strategy is Strategy.CACHE_FIRST:
            return await self.cache_first(request)
        if strategy is Strategy.NETWORK_FIRST:
            return await self.network_first(request)
        return await self.stale_while_revalidate(request)

    async def cache_first(self, request: ResourceRequest) -> CachedResponse:
        """Serve from cache; only go to the network on a miss."""
        cached = await self._store.find(request)
        if cached is not None:
            logger.debug("Cache hit for %s", request.url)
            return cached

        logger.debug("Cache miss for %s, fetching from network", request.url)
        response = await self._fetcher.fetch(request)
        if response.ok:
            await self.write_through(request, response)
        return response

    async def network_first(self, request: ResourceRequest) -> CachedResponse:
        """Serve from the network; fall back to the cache if it fails."""
        try:
            response = await self._fetcher.fetch(request)
        except NetworkFetchError:
            logger.info("Network failed for %s, trying cache", request.url)
            cached = await self._store.find(request)
            if cached is not None:
                return cached
            logger.warning("Both network and cache failed for %s", request.url)
            raise

        if response.ok:
            await self.write_through(request, response)
        return response

    async def stale_while_revalidate(self, request: ResourceRequest) -> CachedResponse:
        """Serve the cached response immediately and refresh it in the background.

        Without a cached response the caller waits for the revalidation
        fetch and receives its outcome, failure included.
        """
        cached = await self._store.find(request)
        task = asyncio.create_task(self._revalidate(request))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        task.add_done_callback(self._log_background_failure)

        if cached is not None:
            logger.debug("Stale cache hit for %s", request.url)
            return cached

        logger.debug("No cache for %s, waiting for network", request.url)
        # Shielded so a cancelled caller does not cancel the fetch
        return await asyncio.shield(task)

    async def _revalidate(self, request: ResourceRequest) -> CachedResponse:
        response = await self._fetcher.fetch(request)
        if response.ok:
            await self.write_through(request, response)
            logger.debug("Background cache update for %s", request.url)
        return response

    @staticmethod
    def _log_background_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Background update failed: %s", error)

    async def write_through(self, request: ResourceRequest, response: CachedResponse) -> bool:
        """Store a network response in the partition matching the request.

        Dynamic writes are followed by size and age enforcement.

        Returns:
            True if the response was persisted
        """
        kind = self._classifier.partition_for(request)
        stored = await self._store.write(kind, request, response)
        if stored and kind is PartitionKind.DYNAMIC:
            await self._enforcer.expire(kind, self._config.max_age)
            await self._enforcer.enforce(kind, self._config.max_dynamic_items)
        return stored

    @property
    def pending_background(self) -> int:
        """Number of revalidation tasks still running."""
        return len(self._background)

    async def wait_for_background(self) -> None:
        """Wait for in-flight revalidation tasks (used at shutdown)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
