"""Repository layer for data access.

This layer wraps the platform primitives (Redis, the network, open
clients, notification display) behind protocol-based interfaces. This
enables:
- Easy swapping of implementations (Redis -> memory, real network -> mock transport)
- Unit testing with lightweight implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from offline_cache.protocols import CacheStorage, ClientRegistry, NetworkFetcher, NotificationSink

from .client_registry import InMemoryClientRegistry
from .httpx_fetcher import HttpxNetworkFetcher
from .memory_repository import MemoryCacheRepository
from .notification_center import InMemoryNotificationCenter
from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStorage",
    "ClientRegistry",
    "NetworkFetcher",
    "NotificationSink",
    "HttpxNetworkFetcher",
    "InMemoryClientRegistry",
    "InMemoryNotificationCenter",
    "MemoryCacheRepository",
    "RedisCacheRepository",
]
