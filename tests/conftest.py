"""
Pytest configuration and fixtures for offline cache tests.
"""

import asyncio

import httpx
import pytest

from offline_cache.config import CacheConfig
from offline_cache.entities import CachedResponse, ResourceRequest
from offline_cache.repositories import (
    HttpxNetworkFetcher,
    InMemoryClientRegistry,
    InMemoryNotificationCenter,
    MemoryCacheRepository,
)
from offline_cache.services import (
    CacheStore,
    LifecycleManager,
    OfflineWorker,
    ResourceClassifier,
    SizeBoundEnforcer,
    StrategyExecutor,
)

APP_URL = "http://app.test/"


class FakeNetwork:
    """Scriptable upstream served through httpx.MockTransport.

    Routes map absolute URLs to (status, body). Unknown URLs answer 404.
    Setting `offline` (or listing a URL in `unreachable`) makes requests
    fail at the transport level. `gate`, when set, holds every request
    until the event fires.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes]] = {}
        self.unreachable: set[str] = set()
        self.offline = False
        self.gate: asyncio.Event | None = None
        self.calls: list[httpx.Request] = []

    def serve(self, url: str, body: bytes | str, status: int = 200) -> None:
        self.routes[url] = (status, body.encode() if isinstance(body, str) else body)

    def calls_to(self, url: str) -> int:
        return sum(1 for call in self.calls if str(call.url) == url)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        url = str(request.url)
        if self.offline or url in self.unreachable:
            raise httpx.ConnectError("Network is unreachable", request=request)
        status, body = self.routes.get(url, (404, b"not found"))
        return httpx.Response(status, content=body, headers={"content-type": "text/plain"})


def make_fetcher(network: FakeNetwork) -> HttpxNetworkFetcher:
    return HttpxNetworkFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(network.handler)))


def get(url: str, **headers: str) -> ResourceRequest:
    return ResourceRequest(url=url, headers=headers)


def ok(body: str, url: str = "") -> CachedResponse:
    return CachedResponse(status=200, headers={"content-type": "text/plain"}, body=body.encode(), url=url)


@pytest.fixture
def config() -> CacheConfig:
    """Cache configuration for an app served from http://app.test/."""
    return CacheConfig(base_url=APP_URL, max_dynamic_items=3)


@pytest.fixture
def network(config: CacheConfig) -> FakeNetwork:
    """Upstream that serves every core and optional asset."""
    net = FakeNetwork()
    for asset in config.core_assets + config.optional_assets:
        url = config.resolve(asset)
        net.serve(url, f"content of {url}")
    return net


@pytest.fixture
async def fetcher(network: FakeNetwork):
    f = make_fetcher(network)
    yield f
    await f.close()


@pytest.fixture
def storage() -> MemoryCacheRepository:
    return MemoryCacheRepository()


@pytest.fixture
def store(config: CacheConfig, storage: MemoryCacheRepository) -> CacheStore:
    return CacheStore(config=config, storage=storage)


@pytest.fixture
def classifier(config: CacheConfig) -> ResourceClassifier:
    return ResourceClassifier(config)


@pytest.fixture
def enforcer(store: CacheStore) -> SizeBoundEnforcer:
    return SizeBoundEnforcer(store)


@pytest.fixture
def executor(
    config: CacheConfig,
    store: CacheStore,
    fetcher: HttpxNetworkFetcher,
    classifier: ResourceClassifier,
    enforcer: SizeBoundEnforcer,
) -> StrategyExecutor:
    return StrategyExecutor(config, store, fetcher, classifier, enforcer)


@pytest.fixture
def clients() -> InMemoryClientRegistry:
    return InMemoryClientRegistry()


@pytest.fixture
def notifications() -> InMemoryNotificationCenter:
    return InMemoryNotificationCenter()


@pytest.fixture
def lifecycle(
    config: CacheConfig,
    store: CacheStore,
    fetcher: HttpxNetworkFetcher,
    classifier: ResourceClassifier,
    executor: StrategyExecutor,
    clients: InMemoryClientRegistry,
) -> LifecycleManager:
    return LifecycleManager(config, store, fetcher, classifier, executor, clients)


@pytest.fixture
def worker(
    config: CacheConfig,
    storage: MemoryCacheRepository,
    fetcher: HttpxNetworkFetcher,
    clients: InMemoryClientRegistry,
    notifications: InMemoryNotificationCenter,
) -> OfflineWorker:
    return OfflineWorker.create(
        config=config,
        storage=storage,
        fetcher=fetcher,
        clients=clients,
        notifications=notifications,
    )
