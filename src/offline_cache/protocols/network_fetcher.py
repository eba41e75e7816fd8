"""Network fetch protocol."""

from typing import Protocol, runtime_checkable

from offline_cache.entities import CachedResponse, ResourceRequest


@runtime_checkable
class NetworkFetcher(Protocol):
    """Protocol for the network primitive.

    An HTTP error status is still a response; only transport failures
    raise `offline_cache.exceptions.NetworkFetchError`.
    """

    async def fetch(self, request: ResourceRequest) -> CachedResponse:
        """Perform the request against the network.

        Args:
            request: The request to send

        Returns:
            The captured response

        Raises:
            NetworkFetchError: If no response could be obtained
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
