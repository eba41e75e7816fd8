"""HTTP handlers for the worker runtime.

Handlers convert between HTTP (FastAPI requests, DTOs) and worker events.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import dataclasses
from urllib.parse import urljoin

from fastapi import HTTPException, Request, Response, status

from offline_cache.dto import (
    ClientItem,
    ClientRegistrationRequest,
    EventResponse,
    FetchRequest,
    HealthCheckResponse,
    LifecycleResponse,
    NotificationClickRequest,
    NotificationItem,
    PartitionStats,
    PushEventRequest,
    SyncEventRequest,
    WorkerStatusResponse,
)
from offline_cache.entities import (
    ActivateEvent,
    CachedResponse,
    ClientContext,
    FetchEvent,
    InstallEvent,
    Notification,
    NotificationClickEvent,
    PeriodicSyncEvent,
    PushEvent,
    ResourceRequest,
    SyncEvent,
)
from offline_cache.exceptions import CoreAssetInstallError, LifecycleStateError, NetworkFetchError
from offline_cache.repositories import InMemoryClientRegistry, InMemoryNotificationCenter
from offline_cache.services import OfflineWorker

# Set by the ASGI server for the outgoing response
_SKIPPED_RESPONSE_HEADERS = frozenset({"content-length", "transfer-encoding", "connection"})


def _client_item(client: ClientContext) -> ClientItem:
    return ClientItem(**dataclasses.asdict(client))


def _notification_item(notification: Notification) -> NotificationItem:
    return NotificationItem(
        notification_id=notification.notification_id,
        title=notification.title,
        body=notification.body,
        icon=notification.icon,
        badge=notification.badge,
        vibrate=list(notification.vibrate),
        data=notification.data,
        actions=[dataclasses.asdict(action) for action in notification.actions],
    )


class WorkerHandler:
    """HTTP handlers for worker operations.

    This handler delegates to OfflineWorker and handles HTTP-specific
    concerns like:
    - Converting HTTP requests into FetchEvents and responses back
    - Converting entities to DTOs
    - Setting appropriate status codes
    """

    def __init__(
        self,
        worker: OfflineWorker,
        clients: InMemoryClientRegistry,
        notifications: InMemoryNotificationCenter,
    ) -> None:
        """Initialize the worker handler.

        Args:
            worker: The offline worker (required).
            clients: Client registry shared with the worker.
            notifications: Notification center shared with the worker.
        """
        self._worker = worker
        self._clients = clients
        self._notifications = notifications

    @staticmethod
    def to_http(response: CachedResponse) -> Response:
        headers = {k: v for k, v in response.headers.items() if k not in _SKIPPED_RESPONSE_HEADERS}
        return Response(content=response.body, status_code=response.status, headers=headers)

    async def _serve(self, request: ResourceRequest) -> Response:
        try:
            response = await self._worker.dispatch(FetchEvent(request))
        except NetworkFetchError as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Upstream request failed: {e}",
            ) from e
        return self.to_http(response)

    async def intercept(self, request: Request) -> Response:
        """Handle any request addressed to the application origin.

        The request path is resolved against the application base URL and
        delivered to the worker as a FetchEvent.
        """
        target = urljoin(self._worker.config.base_url, request.url.path.lstrip("/"))
        if request.url.query:
            target = f"{target}?{request.url.query}"

        resource = ResourceRequest(
            url=target,
            method=request.method,
            headers=dict(request.headers),
            body=await request.body(),
        )
        return await self._serve(resource)

    async def fetch(self, request: FetchRequest) -> Response:
        """Handle POST /_worker/fetch requests for absolute URLs."""
        return await self._serve(ResourceRequest(url=request.url, method=request.method, headers=request.headers))

    async def install(self) -> LifecycleResponse:
        """Handle POST /_worker/install requests.

        Raises:
            HTTPException: 503 if a core asset could not be cached
        """
        try:
            state = await self._worker.dispatch(InstallEvent())
        except CoreAssetInstallError as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Installation failed: {e}",
            ) from e

        return LifecycleResponse(
            state=state.value,
            version=self._worker.config.version,
            message="Installation completed successfully",
        )

    async def activate(self) -> LifecycleResponse:
        """Handle POST /_worker/activate requests.

        Raises:
            HTTPException: 409 if the worker is not installed
        """
        try:
            state = await self._worker.dispatch(ActivateEvent())
        except LifecycleStateError as e:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Activation refused: {e}",
            ) from e
        return LifecycleResponse(
            state=state.value,
            version=self._worker.config.version,
            message="Activation completed successfully",
        )

    async def sync(self, request: SyncEventRequest) -> EventResponse:
        handled = await self._worker.dispatch(SyncEvent(tag=request.tag))
        return EventResponse(event="sync", handled=handled, detail={"tag": request.tag})

    async def periodic_sync(self, request: SyncEventRequest) -> EventResponse:
        refreshed = await self._worker.dispatch(PeriodicSyncEvent(tag=request.tag))
        detail: dict = {"tag": request.tag}
        if refreshed is not None:
            detail["refreshed"] = refreshed
        return EventResponse(event="periodicsync", handled=refreshed is not None, detail=detail)

    async def push(self, request: PushEventRequest) -> EventResponse:
        notification = await self._worker.dispatch(PushEvent(payload=request.payload))
        if notification is None:
            return EventResponse(event="push", handled=False)
        return EventResponse(
            event="push",
            handled=True,
            detail={"notification": _notification_item(notification).model_dump()},
        )

    async def notification_click(self, request: NotificationClickRequest) -> EventResponse:
        client = await self._worker.dispatch(
            NotificationClickEvent(notification_id=request.notification_id, action=request.action)
        )
        if client is None:
            return EventResponse(event="notificationclick", handled=False)
        return EventResponse(
            event="notificationclick",
            handled=True,
            detail={"client": _client_item(client).model_dump()},
        )

    async def list_notifications(self) -> list[NotificationItem]:
        return [_notification_item(n) for n in self._notifications.displayed]

    async def register_client(self, request: ClientRegistrationRequest) -> ClientItem:
        client = self._clients.register(url=request.url, client_id=request.client_id)
        return _client_item(client)

    async def list_clients(self) -> list[ClientItem]:
        return [_client_item(c) for c in await self._clients.list_clients()]

    async def remove_client(self, client_id: str) -> dict:
        if not self._clients.unregister(client_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown client: {client_id}",
            )
        return {"success": True, "client_id": client_id}

    async def status(self) -> WorkerStatusResponse:
        """Handle GET /_worker/status requests."""
        try:
            stats = await self._worker.cache_store.stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return WorkerStatusResponse(
            state=self._worker.state.value,
            version=self._worker.config.version,
            partitions=[PartitionStats(name=name, entries=count) for name, count in stats.items()],
            pending_revalidations=self._worker.executor.pending_background,
            max_dynamic_items=self._worker.config.max_dynamic_items,
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /_worker/health requests."""
        is_healthy = await self._worker.cache_store.is_healthy()
        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            storage_healthy=is_healthy,
            state=self._worker.state.value,
        )
