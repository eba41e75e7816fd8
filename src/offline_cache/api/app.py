from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from offline_cache.api.dependencies import HandlerDep, WorkerDep, lifespan
from offline_cache.config import Settings, get_settings
from offline_cache.dto import (
    ClientItem,
    ClientRegistrationRequest,
    EventResponse,
    FetchRequest,
    HealthCheckResponse,
    LifecycleResponse,
    NotificationClickRequest,
    NotificationItem,
    PushEventRequest,
    SyncEventRequest,
    WorkerStatusResponse,
)
from offline_cache.protocols import CacheStorage, NetworkFetcher

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    settings: Settings | None = None,
    *,
    storage: CacheStorage | None = None,
    fetcher: NetworkFetcher | None = None,
) -> FastAPI:
    """Create the worker runtime application.

    Args:
        settings: Settings to use instead of the environment.
        storage: Storage backend to use instead of the configured one.
        fetcher: Network primitive to use instead of httpx.

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Offline Cache",
        description="Offline caching worker runtime for the Units Hub web application",
        version=settings.cache_version.removeprefix("v"),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage_override = storage
    app.state.fetcher_override = fetcher

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/_worker")
    async def root(worker: WorkerDep) -> dict[str, Any]:
        """Root endpoint with runtime information."""
        return {
            "name": "Offline Cache",
            "version": worker.config.version,
            "endpoints": {
                "status": "/_worker/status",
                "health": "/_worker/health",
                "lifecycle": ["/_worker/install", "/_worker/activate"],
                "events": [
                    "/_worker/fetch",
                    "/_worker/sync",
                    "/_worker/periodicsync",
                    "/_worker/push",
                    "/_worker/notificationclick",
                ],
                "docs": "/docs",
            },
        }

    @app.get("/_worker/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.get("/_worker/status", response_model=WorkerStatusResponse)
    async def worker_status(handler: HandlerDep) -> WorkerStatusResponse:
        return await handler.status()

    @app.post("/_worker/install", response_model=LifecycleResponse)
    async def install(handler: HandlerDep) -> LifecycleResponse:
        return await handler.install()

    @app.post("/_worker/activate", response_model=LifecycleResponse)
    async def activate(handler: HandlerDep) -> LifecycleResponse:
        return await handler.activate()

    @app.post("/_worker/fetch")
    async def fetch(request: FetchRequest, handler: HandlerDep) -> Response:
        """Deliver a fetch event for an absolute (possibly cross-origin) URL."""
        return await handler.fetch(request)

    @app.post("/_worker/sync", response_model=EventResponse)
    async def sync(request: SyncEventRequest, handler: HandlerDep) -> EventResponse:
        return await handler.sync(request)

    @app.post("/_worker/periodicsync", response_model=EventResponse)
    async def periodic_sync(request: SyncEventRequest, handler: HandlerDep) -> EventResponse:
        return await handler.periodic_sync(request)

    @app.post("/_worker/push", response_model=EventResponse)
    async def push(request: PushEventRequest, handler: HandlerDep) -> EventResponse:
        return await handler.push(request)

    @app.post("/_worker/notificationclick", response_model=EventResponse)
    async def notification_click(request: NotificationClickRequest, handler: HandlerDep) -> EventResponse:
        return await handler.notification_click(request)

    @app.get("/_worker/notifications", response_model=list[NotificationItem])
    async def notifications(handler: HandlerDep) -> list[NotificationItem]:
        return await handler.list_notifications()

    @app.get("/_worker/clients", response_model=list[ClientItem])
    async def list_clients(handler: HandlerDep) -> list[ClientItem]:
        return await handler.list_clients()

    @app.post("/_worker/clients", response_model=ClientItem)
    async def register_client(request: ClientRegistrationRequest, handler: HandlerDep) -> ClientItem:
        return await handler.register_client(request)

    @app.delete("/_worker/clients/{client_id}")
    async def remove_client(client_id: str, handler: HandlerDep) -> dict:
        return await handler.remove_client(client_id)

    # Registered last: everything else is a request for the application itself
    @app.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
    async def intercept(request: Request, handler: HandlerDep) -> Response:
        return await handler.intercept(request)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "offline_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
