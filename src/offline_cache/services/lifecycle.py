"""Worker lifecycle orchestration.

Install pre-populates the caches, activate sweeps partitions left behind
by older versions and takes control of open clients, and intercept
serves each request through the strategy executor with a deterministic
offline fallback.
"""

import asyncio
import json
import logging

from offline_cache.config import CacheConfig
from offline_cache.entities import CachedResponse, LifecycleState, PartitionKind, ResourceRequest
from offline_cache.exceptions import (
    CoreAssetInstallError,
    LifecycleStateError,
    NetworkFetchError,
    OfflineCacheError,
    StorageError,
)
from offline_cache.protocols import ClientRegistry, NetworkFetcher
from offline_cache.services.cache_store import CacheStore
from offline_cache.services.classifier import ResourceClassifier
from offline_cache.services.strategy_executor import StrategyExecutor

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "This feature is not available offline"


def offline_response(message: str = OFFLINE_MESSAGE) -> CachedResponse:
    """Build the 503 JSON response returned when nothing else is available."""
    return CachedResponse(
        status=503,
        headers={"content-type": "application/json"},
        body=json.dumps({"error": "offline", "message": message}).encode(),
        reason="Service Unavailable",
    )


class LifecycleManager:
    """Orchestrates install, activate and request interception.

    State machine: new -> installing -> waiting -> activating -> active.
    A failed install leaves the manager redundant; the previously active
    worker, if any, keeps serving.

    Example:
        ```python
        lifecycle = LifecycleManager(config, store, fetcher, classifier, executor, clients)
        await lifecycle.install()
        await lifecycle.activate()
        response = await lifecycle.intercept(ResourceRequest(url))
        ```
    """

    def __init__(
        self,
        config: CacheConfig,
        cache_store: CacheStore,
        fetcher: NetworkFetcher,
        classifier: ResourceClassifier,
        executor: StrategyExecutor,
        clients: ClientRegistry,
    ) -> None:
        self._config = config
        self._store = cache_store
        self._fetcher = fetcher
        self._classifier = classifier
        self._executor = executor
        self._clients = clients
        self._state = LifecycleState.NEW

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    async def install(self) -> None:
        """Pre-populate the static and image partitions.

        Core assets must all be cached; optional assets are best effort.
        On success the worker skips waiting and becomes the active worker.

        Raises:
            CoreAssetInstallError: If any core asset could not be cached
        """
        logger.info("Installing %s...", self._config.version)
        self._state = LifecycleState.INSTALLING

        core, _ = await asyncio.gather(
            self._cache_core_assets(),
            self._cache_optional_assets(),
            return_exceptions=True,
        )
        if isinstance(core, BaseException):
            self._state = LifecycleState.REDUNDANT
            logger.error("Installation of %s failed: %s", self._config.version, core)
            await self._discard_empty_partitions()
            raise core

        self._state = LifecycleState.WAITING
        await self._clients.skip_waiting(self._config.version)
        logger.info("Installation of %s completed", self._config.version)

    async def _fetch_asset(self, asset: str) -> tuple[ResourceRequest, CachedResponse]:
        request = ResourceRequest(self._config.resolve(asset))
        return request, await self._fetcher.fetch(request)

    async def _cache_core_assets(self) -> None:
        """Fetch every core asset, then store them all.

        Nothing is written unless every fetch succeeded with a 2xx status.
        """
        try:
            await self._store.open(PartitionKind.STATIC)
        except StorageError as e:
            raise CoreAssetInstallError(list(self._config.core_assets)) from e

        results = await asyncio.gather(
            *(self._fetch_asset(asset) for asset in self._config.core_assets),
            return_exceptions=True,
        )

        failed = [
            asset
            for asset, result in zip(self._config.core_assets, results)
            if isinstance(result, BaseException) or not result[1].ok
        ]
        if failed:
            raise CoreAssetInstallError(failed)

        for asset, (request, response) in zip(self._config.core_assets, results):
            if not await self._store.write(PartitionKind.STATIC, request, response):
                failed.append(asset)
        if failed:
            raise CoreAssetInstallError(failed)

        logger.info("Core assets cached successfully")

    async def _cache_optional_assets(self) -> None:
        try:
            await self._store.open(PartitionKind.IMAGE)
        except StorageError as e:
            logger.warning("Optional assets caching failed: %s", e)
            return

        async def cache_one(asset: str) -> None:
            try:
                request, response = await self._fetch_asset(asset)
            except NetworkFetchError as e:
                logger.warning("Could not cache optional asset %s: %s", asset, e)
                return
            if response.ok and await self._store.write(PartitionKind.IMAGE, request, response):
                logger.info("Cached optional asset: %s", asset)

        await asyncio.gather(*(cache_one(asset) for asset in self._config.optional_assets))
        logger.info("Optional assets caching completed")

    async def _discard_empty_partitions(self) -> None:
        """Remove the partitions a failed install opened but never filled.

        Partitions that already hold entries (a previous install of the
        same version) are kept.
        """
        for kind in (PartitionKind.STATIC, PartitionKind.IMAGE):
            name = self._store.name_of(kind)
            try:
                if name in await self._store.list_partition_names() and not await self._store.list_entries(kind):
                    await self._store.delete_partition(name)
                    logger.info("Removed empty cache %s", name)
            except StorageError as e:
                logger.warning("Could not remove empty cache %s: %s", name, e)

    async def activate(self) -> None:
        """Delete stale partitions and claim all open clients.

        Only an installed (waiting) worker can activate. Activating an
        active worker again is a no-op.

        Raises:
            LifecycleStateError: If the worker has not been installed successfully
        """
        if self._state is LifecycleState.ACTIVE:
            logger.info("%s is already active", self._config.version)
            return
        if self._state is not LifecycleState.WAITING:
            raise LifecycleStateError("activate", self._state.value)

        logger.info("Activating %s...", self._config.version)
        self._state = LifecycleState.ACTIVATING

        await asyncio.gather(
            self.cleanup_old_caches(),
            self._clients.claim(self._config.version),
        )

        self._state = LifecycleState.ACTIVE
        logger.info("Activation of %s completed", self._config.version)

    async def cleanup_old_caches(self) -> list[str]:
        """Delete partitions of other versions of this application.

        Partitions without the application prefix belong to someone else
        and are left alone.

        Returns:
            Names of the deleted partitions
        """
        try:
            names = await self._store.list_partition_names()
        except StorageError as e:
            logger.error("Cache cleanup failed: %s", e)
            return []

        current = self._config.current_partitions
        stale = sorted(
            name for name in names if name.startswith(self._config.partition_prefix) and name not in current
        )

        async def delete_one(name: str) -> str | None:
            try:
                await self._store.delete_partition(name)
            except StorageError as e:
                logger.error("Failed to delete old cache %s: %s", name, e)
                return None
            logger.info("Deleted old cache: %s", name)
            return name

        deleted = await asyncio.gather(*(delete_one(name) for name in stale))
        return [name for name in deleted if name is not None]

    async def intercept(self, request: ResourceRequest) -> CachedResponse:
        """Serve an intercepted request.

        Non-GET requests go straight to the network. GET requests are served
        with their classified strategy, and with the offline fallback if
        that strategy fails.

        Raises:
            NetworkFetchError: Only for non-GET requests the network could not serve
        """
        if request.method != "GET":
            return await self._fetcher.fetch(request)

        strategy = self._classifier.classify(request)
        try:
            return await self._executor.execute(request, strategy)
        except OfflineCacheError as e:
            logger.error("Request handling failed for %s (%s): %s", request.url, strategy.value, e)
            return await self.offline_fallback(request)

    async def offline_fallback(self, request: ResourceRequest) -> CachedResponse:
        """Produce a response when neither network nor cache could.

        HTML requests get the cached application shell, image requests the
        cached placeholder icon. If that asset is not cached either, or for
        any other request, a 503 JSON body is returned.
        """
        if request.accepts("text/html"):
            shell = await self._store.find(ResourceRequest(self._config.resolve(self._config.shell_asset)))
            if shell is not None:
                return shell
        elif self._classifier.is_image(request):
            placeholder = await self._store.find(
                ResourceRequest(self._config.resolve(self._config.placeholder_asset))
            )
            if placeholder is not None:
                return placeholder

        return offline_response()

    async def refresh_static(self) -> int:
        """Re-fetch every core asset into the static partition.

        Each asset is refreshed independently; failures are logged and the
        previously cached copy stays in place.

        Returns:
            Number of assets refreshed
        """
        logger.info("Updating cache in background...")
        refreshed = 0
        for asset in self._config.core_assets:
            try:
                request, response = await self._fetch_asset(asset)
            except NetworkFetchError as e:
                logger.warning("Could not update %s: %s", asset, e)
                continue
            if response.ok and await self._store.write(PartitionKind.STATIC, request, response):
                refreshed += 1

        logger.info("Background cache update completed (%d/%d)", refreshed, len(self._config.core_assets))
        return refreshed
