"""Offline Cache - offline caching worker for the Units Hub web application.

This package provides a layered architecture for offline caching:

Layers:
    - protocols: Interface contracts (CacheStorage, NetworkFetcher, ClientRegistry, NotificationSink)
    - repositories: Platform primitive implementations (Redis, memory, httpx)
    - services: Caching engine (classification, strategies, lifecycle, dispatch)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from offline_cache import CacheConfig, OfflineWorker
    from offline_cache.repositories import (
        HttpxNetworkFetcher,
        InMemoryClientRegistry,
        InMemoryNotificationCenter,
        RedisCacheRepository,
    )

    worker = OfflineWorker.create(
        config=CacheConfig(),
        storage=RedisCacheRepository.create(),
        fetcher=HttpxNetworkFetcher.create(),
        clients=InMemoryClientRegistry(),
        notifications=InMemoryNotificationCenter(),
    )
    await worker.start()
    ```

For the HTTP runtime:
    ```python
    from offline_cache.api.app import app
    ```
"""

from offline_cache.config import CacheConfig, Settings, get_redis_client, get_settings
from offline_cache.entities import CachedResponse, PartitionKind, ResourceRequest, Strategy
from offline_cache.exceptions import (
    CoreAssetInstallError,
    LifecycleStateError,
    NetworkFetchError,
    OfflineCacheError,
    StorageError,
)
from offline_cache.handlers import WorkerHandler
from offline_cache.protocols import CacheStorage, ClientRegistry, NetworkFetcher, NotificationSink
from offline_cache.repositories import MemoryCacheRepository, RedisCacheRepository
from offline_cache.services import (
    CacheStore,
    LifecycleManager,
    OfflineWorker,
    ResourceClassifier,
    SizeBoundEnforcer,
    StrategyExecutor,
)

__all__ = [
    # Configuration
    "CacheConfig",
    "Settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStorage",
    "ClientRegistry",
    "NetworkFetcher",
    "NotificationSink",
    # Services (caching engine)
    "CacheStore",
    "LifecycleManager",
    "OfflineWorker",
    "ResourceClassifier",
    "SizeBoundEnforcer",
    "StrategyExecutor",
    # Handlers (HTTP)
    "WorkerHandler",
    # Repositories (data access)
    "MemoryCacheRepository",
    "RedisCacheRepository",
    # Entities (domain models)
    "CachedResponse",
    "PartitionKind",
    "ResourceRequest",
    "Strategy",
    # Errors
    "CoreAssetInstallError",
    "LifecycleStateError",
    "NetworkFetchError",
    "OfflineCacheError",
    "StorageError",
]
