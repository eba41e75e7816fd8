"""Offline worker.

Wires the cache components together and registers a handler for every
lifecycle hook the host runtime delivers: install, activate, fetch,
sync, periodicsync, push and notificationclick.
"""

import logging
import uuid
from typing import Any

from offline_cache.config import CacheConfig
from offline_cache.entities import (
    ActivateEvent,
    CachedResponse,
    ClientContext,
    FetchEvent,
    InstallEvent,
    LifecycleState,
    Notification,
    NotificationAction,
    NotificationClickEvent,
    PeriodicSyncEvent,
    PushEvent,
    SyncEvent,
    WorkerEvent,
)
from offline_cache.exceptions import CoreAssetInstallError
from offline_cache.protocols import CacheStorage, ClientRegistry, NetworkFetcher, NotificationSink
from offline_cache.services.cache_store import CacheStore
from offline_cache.services.classifier import ResourceClassifier
from offline_cache.services.dispatcher import EventDispatcher
from offline_cache.services.lifecycle import LifecycleManager
from offline_cache.services.size_bound import SizeBoundEnforcer
from offline_cache.services.strategy_executor import StrategyExecutor

logger = logging.getLogger(__name__)


class OfflineWorker:
    """The offline caching worker.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStorage: Redis, in-memory, ...
    - NetworkFetcher: httpx, a mock transport in tests, ...
    - ClientRegistry / NotificationSink: the host runtime's primitives

    Example:
        ```python
        worker = OfflineWorker.create(
            config=CacheConfig.from_settings(settings),
            storage=RedisCacheRepository.create(),
            fetcher=HttpxNetworkFetcher.create(),
            clients=InMemoryClientRegistry(),
            notifications=InMemoryNotificationCenter(),
        )
        await worker.start()
        response = await worker.dispatch(FetchEvent(ResourceRequest(url)))
        ```
    """

    def __init__(
        self,
        config: CacheConfig,
        storage: CacheStorage,
        fetcher: NetworkFetcher,
        clients: ClientRegistry,
        notifications: NotificationSink,
    ) -> None:
        """Initialize the worker and register its event handlers.

        Args:
            config: Immutable cache configuration.
            storage: Partitioned storage backend.
            fetcher: Network primitive.
            clients: Open-client registry of the host runtime.
            notifications: Notification display of the host runtime.
        """
        self._config = config
        self._fetcher = fetcher
        self._clients = clients
        self._notifications = notifications

        self._store = CacheStore(config=config, storage=storage)
        self._classifier = ResourceClassifier(config)
        self._executor = StrategyExecutor(
            config=config,
            cache_store=self._store,
            fetcher=fetcher,
            classifier=self._classifier,
            enforcer=SizeBoundEnforcer(self._store),
        )
        self._lifecycle = LifecycleManager(
            config=config,
            cache_store=self._store,
            fetcher=fetcher,
            classifier=self._classifier,
            executor=self._executor,
            clients=clients,
        )

        self._dispatcher = EventDispatcher()
        self._dispatcher.register(InstallEvent, self._on_install)
        self._dispatcher.register(ActivateEvent, self._on_activate)
        self._dispatcher.register(FetchEvent, self._on_fetch)
        self._dispatcher.register(SyncEvent, self._on_sync)
        self._dispatcher.register(PeriodicSyncEvent, self._on_periodic_sync)
        self._dispatcher.register(PushEvent, self._on_push)
        self._dispatcher.register(NotificationClickEvent, self._on_notification_click)

    @classmethod
    def create(
        cls,
        config: CacheConfig,
        storage: CacheStorage,
        fetcher: NetworkFetcher,
        clients: ClientRegistry,
        notifications: NotificationSink,
    ) -> "OfflineWorker":
        """Factory method mirroring the constructor."""
        return cls(
            config=config,
            storage=storage,
            fetcher=fetcher,
            clients=clients,
            notifications=notifications,
        )

    async def dispatch(self, event: WorkerEvent) -> Any:
        """Deliver a lifecycle event and wait for it to be handled."""
        return await self._dispatcher.dispatch(event)

    async def start(self) -> bool:
        """Install, then activate immediately (skip-waiting semantics).

        Returns:
            True if the worker is active, False if the install failed
        """
        try:
            await self.dispatch(InstallEvent())
        except CoreAssetInstallError as e:
            logger.error("Worker %s not activated: %s", self._config.version, e)
            return False
        await self.dispatch(ActivateEvent())
        return True

    async def shutdown(self) -> None:
        """Drain background revalidation and close the network client."""
        await self._executor.wait_for_background()
        await self._fetcher.close()

    async def _on_install(self, event: InstallEvent) -> LifecycleState:
        await self._lifecycle.install()
        return self._lifecycle.state

    async def _on_activate(self, event: ActivateEvent) -> LifecycleState:
        await self._lifecycle.activate()
        return self._lifecycle.state

    async def _on_fetch(self, event: FetchEvent) -> CachedResponse:
        # Until activation the worker does not control requests
        if not self._lifecycle.is_active:
            return await self._fetcher.fetch(event.request)
        return await self._lifecycle.intercept(event.request)

    async def _on_sync(self, event: SyncEvent) -> bool:
        logger.info("Background sync triggered: %s", event.tag)
        if event.tag != self._config.sync_tag:
            logger.debug("Ignoring unknown sync tag %s", event.tag)
            return False
        await self.sync_conversions()
        return True

    async def sync_conversions(self) -> None:
        """Sync pending conversion data once back online.

        Nothing is queued offline yet, so there is nothing to send.
        """
        logger.info("Syncing conversion data...")
        logger.info("Sync completed successfully")

    async def _on_periodic_sync(self, event: PeriodicSyncEvent) -> int | None:
        logger.info("Periodic sync triggered: %s", event.tag)
        if event.tag != self._config.periodic_sync_tag:
            logger.debug("Ignoring unknown periodic sync tag %s", event.tag)
            return None
        return await self._lifecycle.refresh_static()

    async def _on_push(self, event: PushEvent) -> Notification | None:
        logger.info("Push notification received")
        if event.payload is None:
            return None

        title = event.payload.get("title")
        body = event.payload.get("body")
        data = event.payload.get("data")
        # Payloads come from the push service untyped; non-object data is wrapped
        if data is not None and not isinstance(data, dict):
            data = {"value": data}

        icon = self._config.resolve(self._config.placeholder_asset)
        notification = Notification(
            notification_id=uuid.uuid4().hex,
            title=str(title) if title not in (None, "") else self._config.notification_title,
            body=str(body) if body not in (None, "") else self._config.notification_body,
            icon=icon,
            badge=icon,
            vibrate=self._config.notification_vibrate,
            data=data or {},
            actions=(
                NotificationAction(action="open", title="Open App", icon=icon),
                NotificationAction(action="dismiss", title="Dismiss"),
            ),
        )
        await self._notifications.show(notification)
        return notification

    async def _on_notification_click(self, event: NotificationClickEvent) -> ClientContext | None:
        logger.info("Notification clicked: %s", event.action)
        await self._notifications.close(event.notification_id)
        if event.action != "open":
            return None

        clients = await self._clients.list_clients()
        if clients:
            focused = await self._clients.focus(clients[0].client_id)
            if focused is not None:
                return focused
        return await self._clients.open_window(self._config.resolve("./"))

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def lifecycle(self) -> LifecycleManager:
        """Get the lifecycle manager (for testing)."""
        return self._lifecycle

    @property
    def cache_store(self) -> CacheStore:
        return self._store

    @property
    def executor(self) -> StrategyExecutor:
        """Get the strategy executor (for testing)."""
        return self._executor

    @property
    def classifier(self) -> ResourceClassifier:
        return self._classifier
