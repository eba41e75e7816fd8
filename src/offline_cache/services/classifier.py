"""Request classification.

Maps a request to the caching strategy that serves it and to the
partition its responses are written to. Pure functions of the request
and the cache configuration.
"""

from offline_cache.config import CacheConfig
from offline_cache.entities import PartitionKind, ResourceRequest, Strategy


class ResourceClassifier:
    """Classifies requests by URL, origin and file extension.

    Rules for `classify`, first match wins:
    1. The path ends with a core asset name -> cache-first
    2. The path has an image extension -> cache-first
    3. The request is cross-origin -> network-first
    4. Anything else -> stale-while-revalidate
    """

    def __init__(self, config: CacheConfig) -> None:
        self._config = config
        self._origin = ResourceRequest(config.base_url).origin
        self._root_path = ResourceRequest(config.base_url).path
        # "./index.html" -> "index.html"; the root asset "./" becomes ""
        self._asset_names = tuple(
            name for name in (asset.removeprefix("./").lstrip("/") for asset in config.core_assets) if name
        )
        self._has_root_asset = any(asset.removeprefix("./").strip("/") == "" for asset in config.core_assets)

    def is_same_origin(self, request: ResourceRequest) -> bool:
        return request.origin == self._origin

    def is_image(self, request: ResourceRequest) -> bool:
        return request.extension in self._config.image_extensions

    def is_core_asset(self, request: ResourceRequest) -> bool:
        """Check if the request path matches an entry of the core asset set.

        The root asset only matches the application root on the serving
        origin, otherwise every URL ending in "/" would count as core.
        """
        path = request.path
        if self._has_root_asset and path == self._root_path and self.is_same_origin(request):
            return True
        return any(path.endswith(name) for name in self._asset_names)

    def classify(self, request: ResourceRequest) -> Strategy:
        if self.is_core_asset(request):
            return Strategy.CACHE_FIRST
        if self.is_image(request):
            return Strategy.CACHE_FIRST
        if not self.is_same_origin(request):
            return Strategy.NETWORK_FIRST
        return Strategy.STALE_WHILE_REVALIDATE

    def partition_for(self, request: ResourceRequest) -> PartitionKind:
        """Choose the partition a network response is written through to."""
        if self.is_image(request):
            return PartitionKind.IMAGE
        if self.is_core_asset(request):
            return PartitionKind.STATIC
        return PartitionKind.DYNAMIC
