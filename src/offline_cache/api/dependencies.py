"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from offline_cache.config import CacheConfig, Settings, configure_logging, get_settings
from offline_cache.handlers import WorkerHandler
from offline_cache.protocols import CacheStorage
from offline_cache.repositories import (
    HttpxNetworkFetcher,
    InMemoryClientRegistry,
    InMemoryNotificationCenter,
    MemoryCacheRepository,
    RedisCacheRepository,
)
from offline_cache.services import OfflineWorker

logger = logging.getLogger(__name__)


def get_worker(request: Request) -> OfflineWorker:
    """Dependency injection for OfflineWorker from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The OfflineWorker instance from app.state

    Raises:
        RuntimeError: If worker is not initialized
    """
    worker = getattr(request.app.state, "worker", None)
    if worker is None:
        raise RuntimeError("OfflineWorker not initialized. Check lifespan setup.")
    return worker


def get_handler(request: Request) -> WorkerHandler:
    """Dependency injection for WorkerHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The WorkerHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "worker_handler", None)
    if handler is None:
        raise RuntimeError("WorkerHandler not initialized. Check lifespan setup.")
    return handler


def build_storage(settings: Settings) -> CacheStorage:
    """Create the storage backend selected by CACHE_BACKEND."""
    if settings.cache_backend == "memory":
        return MemoryCacheRepository()
    return RedisCacheRepository.create(settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Storage and network primitives - from app.state overrides or settings
    2. Worker (caching engine) - stored in app.state.worker
    3. Handler (HTTP endpoints) - stored in app.state.worker_handler

    When AUTO_INSTALL is set the worker is installed and activated before
    the first request is served.

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Drains background revalidation, closes clients and removes all
        services from app.state on shutdown
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    configure_logging(settings.log_level)

    config = CacheConfig.from_settings(settings)
    storage = getattr(app.state, "storage_override", None) or build_storage(settings)
    fetcher = getattr(app.state, "fetcher_override", None) or HttpxNetworkFetcher.create(
        timeout=settings.network_timeout
    )
    clients = InMemoryClientRegistry()
    notifications = InMemoryNotificationCenter()

    worker = OfflineWorker.create(
        config=config,
        storage=storage,
        fetcher=fetcher,
        clients=clients,
        notifications=notifications,
    )

    # Store in app.state (FastAPI pattern)
    app.state.worker = worker
    app.state.worker_handler = WorkerHandler(worker=worker, clients=clients, notifications=notifications)
    app.state.storage = storage

    logger.info("Cache version: %s", config.version)
    logger.info("Application base URL: %s", config.base_url)
    logger.info("Storage backend: %s", settings.cache_backend)

    if settings.auto_install:
        await worker.start()

    yield

    await worker.shutdown()
    if isinstance(storage, RedisCacheRepository):
        await storage.close()

    # Cleanup - remove from app.state
    del app.state.worker_handler
    del app.state.worker
    del app.state.storage
    logger.info("Offline worker shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[WorkerHandler, Depends(get_handler)]
WorkerDep = Annotated[OfflineWorker, Depends(get_worker)]
