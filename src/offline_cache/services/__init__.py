"""Service layer for the caching engine.

Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> OfflineWorker -> LifecycleManager -> StrategyExecutor -> CacheStore -> CacheStorage
    (HTTP)  -> (Dispatch)    -> (Lifecycle)      -> (Strategies)     -> (Partitions) -> (Data Access)

Usage:
    ```python
    from offline_cache.services import OfflineWorker

    worker = OfflineWorker.create(config, storage, fetcher, clients, notifications)
    await worker.start()
    ```
"""

from .cache_store import CacheStore
from .classifier import ResourceClassifier
from .dispatcher import EventDispatcher
from .lifecycle import LifecycleManager, offline_response
from .size_bound import SizeBoundEnforcer
from .strategy_executor import StrategyExecutor
from .worker import OfflineWorker

__all__ = [
    "CacheStore",
    "EventDispatcher",
    "LifecycleManager",
    "OfflineWorker",
    "ResourceClassifier",
    "SizeBoundEnforcer",
    "StrategyExecutor",
    "offline_response",
]
