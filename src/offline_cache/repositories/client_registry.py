"""In-process client registry.

Tracks the pages registered with the host runtime and which worker
version controls them.
"""

import logging
import uuid

from offline_cache.entities import ClientContext

logger = logging.getLogger(__name__)


class InMemoryClientRegistry:
    """In-memory implementation of the ClientRegistry protocol."""

    def __init__(self) -> None:
        self._clients: dict[str, ClientContext] = {}
        self._active_version: str | None = None

    @property
    def active_version(self) -> str | None:
        """Worker version that currently serves requests."""
        return self._active_version

    def register(self, url: str, client_id: str | None = None) -> ClientContext:
        """Register an open page.

        New pages are controlled by the active worker version, if any.
        """
        client = ClientContext(
            client_id=client_id or uuid.uuid4().hex,
            url=url,
            controller=self._active_version,
        )
        self._clients[client.client_id] = client
        return client

    def unregister(self, client_id: str) -> bool:
        return self._clients.pop(client_id, None) is not None

    async def list_clients(self) -> list[ClientContext]:
        return list(self._clients.values())

    async def claim(self, version: str) -> int:
        for client in self._clients.values():
            client.controller = version
        logger.info("Claimed %d client(s) for %s", len(self._clients), version)
        return len(self._clients)

    async def skip_waiting(self, version: str) -> None:
        if self._active_version not in (None, version):
            logger.info("Worker %s preempts active worker %s", version, self._active_version)
        self._active_version = version

    async def focus(self, client_id: str) -> ClientContext | None:
        client = self._clients.get(client_id)
        if client is None:
            return None
        for other in self._clients.values():
            other.focused = other is client
        return client

    async def open_window(self, url: str) -> ClientContext:
        client = self.register(url)
        return await self.focus(client.client_id) or client
