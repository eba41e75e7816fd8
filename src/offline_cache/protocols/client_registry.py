"""Client registry protocol.

Models the host runtime's view of open pages: listing them, claiming
control over them, focusing one or opening a new window.
"""

from typing import Protocol, runtime_checkable

from offline_cache.entities import ClientContext


@runtime_checkable
class ClientRegistry(Protocol):
    async def list_clients(self) -> list[ClientContext]:
        """List all currently open clients, most recently registered last."""
        ...

    async def claim(self, version: str) -> int:
        """Make `version` the controller of every open client.

        Returns:
            Number of clients claimed
        """
        ...

    async def skip_waiting(self, version: str) -> None:
        """Promote `version` to the active worker, preempting the current one."""
        ...

    async def focus(self, client_id: str) -> ClientContext | None:
        """Focus an open client; None if it no longer exists."""
        ...

    async def open_window(self, url: str) -> ClientContext:
        """Open a new client at `url`."""
        ...
