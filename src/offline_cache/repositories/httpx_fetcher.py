"""httpx-based network fetcher.

Performs the real network requests behind every caching strategy. The
layer deliberately imposes no timeout of its own: a hung request stalls
only the strategy awaiting it. A timeout can be opted into with the
NETWORK_TIMEOUT setting.
"""

import logging

import httpx

from offline_cache.entities import CachedResponse, ResourceRequest
from offline_cache.exceptions import NetworkFetchError

logger = logging.getLogger(__name__)

# Headers that describe a single hop and must not be forwarded
_REQUEST_HOP_HEADERS = frozenset(
    {"host", "connection", "content-length", "accept-encoding", "keep-alive", "transfer-encoding", "upgrade"}
)
# The body is already decoded by httpx, so encoding/length headers no longer apply
_RESPONSE_HOP_HEADERS = frozenset(
    {"connection", "content-encoding", "content-length", "keep-alive", "transfer-encoding"}
)


class HttpxNetworkFetcher:
    """httpx implementation of the NetworkFetcher protocol.

    Example:
        ```python
        fetcher = HttpxNetworkFetcher.create()
        response = await fetcher.fetch(ResourceRequest("https://example.com/style.css"))
        print(response.status)  # 200
        await fetcher.close()
        ```
    """

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. None means no timeout.
            client: Pre-built AsyncClient (e.g. with a mock transport).
        """
        self._timeout = timeout
        self._client = client

    @classmethod
    def create(cls, timeout: float | None = None) -> "HttpxNetworkFetcher":
        """Factory method to create HttpxNetworkFetcher with defaults."""
        return cls(timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def fetch(self, request: ResourceRequest) -> CachedResponse:
        """Send a request and capture the full response.

        Args:
            request: The request to send

        Returns:
            The captured response (any status)

        Raises:
            NetworkFetchError: If the URL is invalid or the transport fails
        """
        headers = {k: v for k, v in request.headers.items() if k not in _REQUEST_HOP_HEADERS}

        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=headers,
                content=request.body or None,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkFetchError(request.url, str(e) or type(e).__name__) from e

        return CachedResponse(
            status=response.status_code,
            headers={k: v for k, v in response.headers.items() if k.lower() not in _RESPONSE_HOP_HEADERS},
            body=response.content,
            url=str(response.url),
            reason=response.reason_phrase,
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
