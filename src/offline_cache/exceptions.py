"""Exception hierarchy for the offline cache.

Only `CoreAssetInstallError` is allowed to abort a larger operation (the
install step). Everything else is contained where it is raised: storage
errors degrade to "not persisted", network errors are replaced by the
offline fallback.
"""


class OfflineCacheError(Exception):
    """Base class for all offline cache errors."""


class NetworkFetchError(OfflineCacheError):
    """The network could not produce a response for a request."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Network fetch failed for {url}: {reason}")
        self.url = url
        self.reason = reason


class CoreAssetInstallError(OfflineCacheError):
    """A core asset could not be fetched or stored during install."""

    def __init__(self, failed_assets: list[str]) -> None:
        super().__init__(f"Failed to cache core assets: {', '.join(failed_assets)}")
        self.failed_assets = failed_assets


class StorageError(OfflineCacheError):
    """The cache storage backend rejected an operation."""


class StorageUnavailableError(StorageError):
    """The cache storage backend cannot be reached."""


class StorageQuotaExceededError(StorageError):
    """The cache storage backend is out of space."""


class UnhandledEventError(OfflineCacheError):
    """No handler is registered for a dispatched worker event."""


class LifecycleStateError(OfflineCacheError):
    """A lifecycle step was requested from a state that does not allow it."""

    def __init__(self, step: str, state: str) -> None:
        super().__init__(f"Cannot {step} from state {state!r}")
        self.step = step
        self.state = state
