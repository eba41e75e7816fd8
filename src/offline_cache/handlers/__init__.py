"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on the worker service, not directly on repositories.

Architecture:
    Handler -> OfflineWorker -> Repository
    (HTTP)  -> (Caching)     -> (Data Access)
"""

from .worker_handler import WorkerHandler

__all__ = [
    "WorkerHandler",
]
