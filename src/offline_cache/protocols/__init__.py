"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> in-memory, httpx -> test doubles)
- Unit testing with lightweight implementations
- Clear separation of concerns

Usage:
    ```python
    from offline_cache.protocols import CacheStorage, NetworkFetcher

    storage: CacheStorage = RedisCacheRepository.create()  # works
    storage: CacheStorage = MemoryCacheRepository()        # also works
    ```
"""

from .cache_storage import CacheStorage
from .client_registry import ClientRegistry
from .network_fetcher import NetworkFetcher
from .notification_sink import NotificationSink

__all__ = [
    "CacheStorage",
    "ClientRegistry",
    "NetworkFetcher",
    "NotificationSink",
]
