"""Resource request domain entity."""

from dataclasses import dataclass, field
from urllib.parse import SplitResult, urldefrag, urlsplit


@dataclass(frozen=True)
class ResourceRequest:
    """Domain entity for a request passing through the worker.

    Attributes:
        url: Absolute request URL
        method: HTTP method, upper-cased
        headers: Request headers with lower-cased names
        body: Request body (only meaningful for non-GET requests)
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", {k.lower(): v for k, v in self.headers.items()})

    def _split(self) -> SplitResult | None:
        try:
            return urlsplit(self.url)
        except ValueError:
            return None

    @property
    def path(self) -> str:
        """URL path, or "" when the URL cannot be parsed."""
        parts = self._split()
        if parts is None:
            return ""
        return parts.path or "/"

    @property
    def origin(self) -> str:
        """Scheme, host and port of the request URL.

        An unparseable URL has no origin, so it never counts as same-origin.
        """
        parts = self._split()
        if parts is None:
            return ""
        return f"{parts.scheme}://{parts.netloc}".lower()

    @property
    def extension(self) -> str:
        """Lower-cased file extension of the final path segment, or ""."""
        segment = self.path.rsplit("/", 1)[-1]
        if "." not in segment:
            return ""
        return segment.rsplit(".", 1)[-1].lower()

    @property
    def cache_key(self) -> str:
        """Normalized request identity used as the storage key."""
        try:
            url = urldefrag(self.url).url
        except ValueError:
            url = self.url.split("#", 1)[0]
        return f"GET {url}"

    def accepts(self, mime_type: str) -> bool:
        """Check whether the Accept header mentions a MIME type."""
        return mime_type in self.headers.get("accept", "")
