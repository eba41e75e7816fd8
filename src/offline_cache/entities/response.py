"""Cached response domain entity."""

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class CachedResponse:
    """Domain entity for a captured network response.

    Attributes:
        status: HTTP status code
        headers: Response headers with lower-cased names
        body: Raw response body
        url: URL the response was produced for
        reason: HTTP reason phrase
        cached_at: Unix timestamp when the response was stored (None if never stored)
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""
    reason: str = ""
    cached_at: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", {k.lower(): v for k, v in self.headers.items()})

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    def stamped(self, cached_at: float) -> "CachedResponse":
        """Return a copy carrying the time it was stored."""
        return replace(self, cached_at=cached_at)
