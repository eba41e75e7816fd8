"""
Tests for event dispatch and the worker's event handlers.
"""

import pytest

from conftest import APP_URL, FakeNetwork, get
from offline_cache.entities import (
    ActivateEvent,
    FetchEvent,
    InstallEvent,
    LifecycleState,
    NotificationClickEvent,
    PartitionKind,
    PeriodicSyncEvent,
    PushEvent,
    SyncEvent,
)
from offline_cache.exceptions import LifecycleStateError, UnhandledEventError
from offline_cache.repositories import InMemoryClientRegistry, InMemoryNotificationCenter
from offline_cache.services import EventDispatcher, OfflineWorker


class TestEventDispatcher:
    """Test event routing."""

    @pytest.mark.asyncio
    async def test_unregistered_event_raises(self) -> None:
        dispatcher = EventDispatcher()

        with pytest.raises(UnhandledEventError):
            await dispatcher.dispatch(InstallEvent())

    @pytest.mark.asyncio
    async def test_decorator_registers_handler(self) -> None:
        dispatcher = EventDispatcher()

        @dispatcher.on(SyncEvent)
        async def on_sync(event: SyncEvent) -> str:
            return event.tag

        assert dispatcher.handles(SyncEvent)
        assert not dispatcher.handles(PushEvent)
        assert await dispatcher.dispatch(SyncEvent(tag="outbox")) == "outbox"


class TestWorkerLifecycle:
    """Test install and activation through events."""

    @pytest.mark.asyncio
    async def test_start_activates_worker(self, worker: OfflineWorker) -> None:
        assert worker.state is LifecycleState.NEW

        assert await worker.start()

        assert worker.state is LifecycleState.ACTIVE

    @pytest.mark.asyncio
    async def test_start_with_missing_core_asset(self, worker: OfflineWorker, network: FakeNetwork) -> None:
        network.serve(APP_URL + "manifest.json", "gone", status=410)

        assert not await worker.start()
        assert worker.state is LifecycleState.REDUNDANT

        with pytest.raises(LifecycleStateError):
            await worker.dispatch(ActivateEvent())
        assert worker.state is LifecycleState.REDUNDANT

    @pytest.mark.asyncio
    async def test_fetch_before_activation_is_not_cached(self, worker: OfflineWorker, network: FakeNetwork) -> None:
        url = APP_URL + "api/units.json"
        network.serve(url, "units")

        response = await worker.dispatch(FetchEvent(get(url)))

        assert response.body == b"units"
        assert await worker.cache_store.find(get(url)) is None

    @pytest.mark.asyncio
    async def test_fetch_after_activation_is_cached(self, worker: OfflineWorker, network: FakeNetwork) -> None:
        url = APP_URL + "api/units.json"
        network.serve(url, "units")
        await worker.start()

        await worker.dispatch(FetchEvent(get(url)))

        assert await worker.cache_store.match(PartitionKind.DYNAMIC, get(url)) is not None


class TestSyncEvents:
    """Test background and periodic sync."""

    @pytest.mark.asyncio
    async def test_sync_with_known_tag(self, worker: OfflineWorker) -> None:
        assert await worker.dispatch(SyncEvent(tag="background-sync-conversions")) is True

    @pytest.mark.asyncio
    async def test_sync_with_unknown_tag(self, worker: OfflineWorker) -> None:
        assert await worker.dispatch(SyncEvent(tag="something-else")) is False

    @pytest.mark.asyncio
    async def test_periodic_sync_refreshes_static_assets(self, worker: OfflineWorker) -> None:
        await worker.start()

        refreshed = await worker.dispatch(PeriodicSyncEvent(tag="update-cache"))

        assert refreshed == len(worker.config.core_assets)

    @pytest.mark.asyncio
    async def test_periodic_sync_with_unknown_tag(self, worker: OfflineWorker) -> None:
        assert await worker.dispatch(PeriodicSyncEvent(tag="other")) is None


class TestNotifications:
    """Test push and notification click handling."""

    @pytest.mark.asyncio
    async def test_push_shows_notification_with_defaults(
        self, worker: OfflineWorker, notifications: InMemoryNotificationCenter
    ) -> None:
        notification = await worker.dispatch(PushEvent(payload={"data": {"rate": "EUR"}}))

        assert notification.title == "Sourish Units Hub"
        assert notification.body == "New update available!"
        assert notification.icon == APP_URL + "icon-192.png"
        assert notification.vibrate == (200, 100, 200)
        assert notification.data == {"rate": "EUR"}
        assert [a.action for a in notification.actions] == ["open", "dismiss"]
        assert notifications.displayed == [notification]

    @pytest.mark.asyncio
    async def test_push_uses_payload_title_and_body(self, worker: OfflineWorker) -> None:
        notification = await worker.dispatch(PushEvent(payload={"title": "Rates", "body": "EUR moved"}))

        assert notification.title == "Rates"
        assert notification.body == "EUR moved"

    @pytest.mark.asyncio
    async def test_push_coerces_untyped_payload_values(self, worker: OfflineWorker) -> None:
        notification = await worker.dispatch(PushEvent(payload={"title": 5, "body": "", "data": [1]}))

        assert notification.title == "5"
        assert notification.body == "New update available!"
        assert notification.data == {"value": [1]}

    @pytest.mark.asyncio
    async def test_push_without_payload_shows_nothing(
        self, worker: OfflineWorker, notifications: InMemoryNotificationCenter
    ) -> None:
        assert await worker.dispatch(PushEvent()) is None
        assert notifications.displayed == []

    @pytest.mark.asyncio
    async def test_open_action_without_clients_opens_window(
        self,
        worker: OfflineWorker,
        clients: InMemoryClientRegistry,
        notifications: InMemoryNotificationCenter,
    ) -> None:
        notification = await worker.dispatch(PushEvent(payload={}))

        client = await worker.dispatch(NotificationClickEvent(notification.notification_id, action="open"))

        assert client.url == APP_URL
        assert client.focused
        assert await clients.list_clients() == [client]
        assert notifications.displayed == []

    @pytest.mark.asyncio
    async def test_open_action_focuses_existing_client(
        self, worker: OfflineWorker, clients: InMemoryClientRegistry
    ) -> None:
        page = clients.register(APP_URL + "index.html")

        client = await worker.dispatch(NotificationClickEvent("n1", action="open"))

        assert client is page
        assert page.focused
        assert len(await clients.list_clients()) == 1

    @pytest.mark.asyncio
    async def test_dismiss_action_only_closes(
        self,
        worker: OfflineWorker,
        clients: InMemoryClientRegistry,
        notifications: InMemoryNotificationCenter,
    ) -> None:
        notification = await worker.dispatch(PushEvent(payload={}))

        assert await worker.dispatch(NotificationClickEvent(notification.notification_id, action="dismiss")) is None
        assert notifications.displayed == []
        assert await clients.list_clients() == []
