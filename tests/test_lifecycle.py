"""
Tests for install, activate and request interception.
"""

import json

import pytest

from conftest import APP_URL, FakeNetwork, get
from offline_cache.config import CacheConfig
from offline_cache.entities import LifecycleState, PartitionKind, ResourceRequest
from offline_cache.exceptions import CoreAssetInstallError, LifecycleStateError, NetworkFetchError
from offline_cache.repositories import HttpxNetworkFetcher, InMemoryClientRegistry, MemoryCacheRepository
from offline_cache.services import (
    CacheStore,
    LifecycleManager,
    ResourceClassifier,
    SizeBoundEnforcer,
    StrategyExecutor,
)


class TestInstall:
    """Test cache pre-population."""

    @pytest.mark.asyncio
    async def test_install_caches_every_core_asset(
        self,
        lifecycle: LifecycleManager,
        store: CacheStore,
        clients: InMemoryClientRegistry,
        config: CacheConfig,
    ) -> None:
        await lifecycle.install()

        assert lifecycle.state is LifecycleState.WAITING
        assert clients.active_version == config.version
        for asset in config.core_assets:
            assert await store.match(PartitionKind.STATIC, ResourceRequest(config.resolve(asset))) is not None

    @pytest.mark.asyncio
    async def test_install_caches_optional_assets_in_image_partition(
        self, lifecycle: LifecycleManager, store: CacheStore, config: CacheConfig
    ) -> None:
        await lifecycle.install()

        assert len(await store.list_entries(PartitionKind.IMAGE)) == len(config.optional_assets)

    @pytest.mark.asyncio
    async def test_install_is_idempotent(
        self, lifecycle: LifecycleManager, store: CacheStore, config: CacheConfig
    ) -> None:
        await lifecycle.install()
        first = await store.list_entries(PartitionKind.STATIC)
        await lifecycle.install()

        assert await store.list_entries(PartitionKind.STATIC) == first
        assert len(first) == len(config.core_assets)

    @pytest.mark.asyncio
    async def test_missing_core_asset_fails_install(
        self,
        lifecycle: LifecycleManager,
        store: CacheStore,
        network: FakeNetwork,
        clients: InMemoryClientRegistry,
    ) -> None:
        network.serve(APP_URL + "script.js", "not found", status=404)

        with pytest.raises(CoreAssetInstallError) as exc_info:
            await lifecycle.install()

        assert exc_info.value.failed_assets == ["./script.js"]
        assert lifecycle.state is LifecycleState.REDUNDANT
        assert clients.active_version is None
        assert await store.list_entries(PartitionKind.STATIC) == []

    @pytest.mark.asyncio
    async def test_failed_install_removes_empty_partitions(
        self,
        lifecycle: LifecycleManager,
        store: CacheStore,
        storage: MemoryCacheRepository,
        network: FakeNetwork,
    ) -> None:
        network.serve(APP_URL + "script.js", "not found", status=404)

        with pytest.raises(CoreAssetInstallError):
            await lifecycle.install()

        names = await storage.partition_names()
        assert store.name_of(PartitionKind.STATIC) not in names
        # Optional assets were cached, so the image partition stays
        assert store.name_of(PartitionKind.IMAGE) in names

    @pytest.mark.asyncio
    async def test_failed_reinstall_keeps_populated_partition(
        self, lifecycle: LifecycleManager, store: CacheStore, network: FakeNetwork, config: CacheConfig
    ) -> None:
        await lifecycle.install()
        network.offline = True

        with pytest.raises(CoreAssetInstallError):
            await lifecycle.install()

        assert len(await store.list_entries(PartitionKind.STATIC)) == len(config.core_assets)

    @pytest.mark.asyncio
    async def test_unreachable_core_asset_fails_install(
        self, lifecycle: LifecycleManager, network: FakeNetwork
    ) -> None:
        network.unreachable.add(APP_URL + "style.css")

        with pytest.raises(CoreAssetInstallError):
            await lifecycle.install()

    @pytest.mark.asyncio
    async def test_optional_asset_failure_is_tolerated(
        self, lifecycle: LifecycleManager, store: CacheStore, network: FakeNetwork, config: CacheConfig
    ) -> None:
        network.unreachable.add(config.resolve(config.optional_assets[0]))

        await lifecycle.install()

        assert lifecycle.state is LifecycleState.WAITING
        assert len(await store.list_entries(PartitionKind.IMAGE)) == len(config.optional_assets) - 1


class TestActivate:
    """Test stale partition sweep and client claiming."""

    @pytest.mark.asyncio
    async def test_activate_deletes_only_stale_partitions_of_this_app(self, fetcher: HttpxNetworkFetcher) -> None:
        config = CacheConfig(prefix="app", version="v2", base_url=APP_URL)
        storage = MemoryCacheRepository()
        for name in ["app-static-v1", "app-dynamic-v1", "app-static-v2", "app-dynamic-v2", "app-image-v2", "unrelated-cache"]:
            await storage.open(name)

        store = CacheStore(config=config, storage=storage)
        classifier = ResourceClassifier(config)
        executor = StrategyExecutor(config, store, fetcher, classifier, SizeBoundEnforcer(store))
        clients = InMemoryClientRegistry()
        page = clients.register(APP_URL)
        lifecycle = LifecycleManager(config, store, fetcher, classifier, executor, clients)

        await lifecycle.install()
        await lifecycle.activate()

        assert await storage.partition_names() == {
            "app-static-v2",
            "app-dynamic-v2",
            "app-image-v2",
            "unrelated-cache",
        }
        assert lifecycle.state is LifecycleState.ACTIVE
        assert page.controller == "v2"

    @pytest.mark.asyncio
    async def test_activate_after_failed_install_is_refused(
        self,
        lifecycle: LifecycleManager,
        storage: MemoryCacheRepository,
        network: FakeNetwork,
        clients: InMemoryClientRegistry,
    ) -> None:
        await storage.open("units-hub-static-v1")
        await storage.open("units-hub-dynamic-v1")
        await clients.skip_waiting("v1")
        network.offline = True

        with pytest.raises(CoreAssetInstallError):
            await lifecycle.install()
        with pytest.raises(LifecycleStateError):
            await lifecycle.activate()

        assert lifecycle.state is LifecycleState.REDUNDANT
        assert {"units-hub-static-v1", "units-hub-dynamic-v1"} <= await storage.partition_names()
        assert clients.active_version == "v1"

    @pytest.mark.asyncio
    async def test_activate_before_install_is_refused(self, lifecycle: LifecycleManager) -> None:
        with pytest.raises(LifecycleStateError):
            await lifecycle.activate()

        assert lifecycle.state is LifecycleState.NEW

    @pytest.mark.asyncio
    async def test_activate_twice_is_noop(self, lifecycle: LifecycleManager) -> None:
        await lifecycle.install()
        await lifecycle.activate()
        await lifecycle.activate()

        assert lifecycle.state is LifecycleState.ACTIVE

    @pytest.mark.asyncio
    async def test_cleanup_returns_deleted_names(self, lifecycle: LifecycleManager, storage: MemoryCacheRepository) -> None:
        await storage.open("units-hub-static-v2.0.0")
        await storage.open("units-hub-images-v1.0.0")

        deleted = await lifecycle.cleanup_old_caches()

        assert deleted == ["units-hub-images-v1.0.0", "units-hub-static-v2.0.0"]


class TestIntercept:
    """Test request interception and the offline fallback."""

    @pytest.fixture
    async def active(self, lifecycle: LifecycleManager) -> LifecycleManager:
        await lifecycle.install()
        await lifecycle.activate()
        return lifecycle

    @pytest.mark.asyncio
    async def test_core_asset_is_served_from_cache(self, active: LifecycleManager, network: FakeNetwork) -> None:
        response = await active.intercept(get(APP_URL + "style.css"))

        assert response.status == 200
        assert response.body == f"content of {APP_URL}style.css".encode()
        # Only the install fetch reached the network
        assert network.calls_to(APP_URL + "style.css") == 1

    @pytest.mark.asyncio
    async def test_offline_html_request_gets_app_shell(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await active.intercept(get("https://api.example.com/page", accept="text/html"))

        assert response.status == 200
        assert response.body == f"content of {APP_URL}index.html".encode()

    @pytest.mark.asyncio
    async def test_offline_image_request_gets_placeholder(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await active.intercept(get("https://cdn.example.com/flag.png"))

        assert response.status == 200
        assert response.body == f"content of {APP_URL}icon-192.png".encode()

    @pytest.mark.asyncio
    async def test_offline_other_request_gets_503_json(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await active.intercept(get("https://api.example.com/rates"))

        assert response.status == 503
        assert response.headers["content-type"] == "application/json"
        assert json.loads(response.body) == {"error": "offline", "message": "This feature is not available offline"}

    @pytest.mark.asyncio
    async def test_malformed_url_gets_offline_fallback(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await active.intercept(get("http://[bad/x.css"))

        assert response.status == 503

    @pytest.mark.asyncio
    async def test_malformed_html_url_gets_app_shell(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await active.intercept(get("http://[bad/page", accept="text/html"))

        assert response.status == 200
        assert response.body == f"content of {APP_URL}index.html".encode()

    @pytest.mark.asyncio
    async def test_url_rejected_by_http_client_gets_offline_fallback(
        self, active: LifecycleManager, network: FakeNetwork
    ) -> None:
        response = await active.intercept(get("http://app.test/api/bad\x00name"))

        assert response.status == 503
        assert not any("bad" in str(call.url) for call in network.calls)

    @pytest.mark.asyncio
    async def test_offline_without_cached_shell_gets_503(self, lifecycle: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        response = await lifecycle.intercept(get("https://api.example.com/page", accept="text/html"))

        assert response.status == 503

    @pytest.mark.asyncio
    async def test_non_get_goes_straight_to_network(
        self, active: LifecycleManager, network: FakeNetwork, store: CacheStore
    ) -> None:
        url = APP_URL + "api/convert"
        network.serve(url, "converted")

        response = await active.intercept(ResourceRequest(url, method="POST", body=b"{}"))

        assert response.body == b"converted"
        assert await store.list_entries(PartitionKind.DYNAMIC) == []

    @pytest.mark.asyncio
    async def test_non_get_failure_propagates(self, active: LifecycleManager, network: FakeNetwork) -> None:
        network.offline = True

        with pytest.raises(NetworkFetchError):
            await active.intercept(ResourceRequest(APP_URL + "api/convert", method="POST"))


class TestRefreshStatic:
    """Test periodic refresh of the static partition."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_core_assets(
        self, lifecycle: LifecycleManager, store: CacheStore, network: FakeNetwork, config: CacheConfig
    ) -> None:
        await lifecycle.install()
        network.serve(APP_URL + "style.css", "new css")

        refreshed = await lifecycle.refresh_static()

        assert refreshed == len(config.core_assets)
        cached = await store.match(PartitionKind.STATIC, get(APP_URL + "style.css"))
        assert cached is not None and cached.body == b"new css"

    @pytest.mark.asyncio
    async def test_refresh_keeps_previous_copy_when_offline(
        self, lifecycle: LifecycleManager, store: CacheStore, network: FakeNetwork
    ) -> None:
        await lifecycle.install()
        network.offline = True

        assert await lifecycle.refresh_static() == 0
        assert await store.match(PartitionKind.STATIC, get(APP_URL + "style.css")) is not None
