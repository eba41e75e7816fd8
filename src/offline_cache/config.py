import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from urllib.parse import urljoin

import redis.asyncio as redis
from dotenv import load_dotenv

from offline_cache.entities import PartitionKind

load_dotenv()

CORE_ASSETS: tuple[str, ...] = (
    "./",
    "./index.html",
    "./style.css",
    "./script.js",
    "./manifest.json",
    "./icon-192.png",
    "./icon-512.png",
)

OPTIONAL_ASSETS: tuple[str, ...] = (
    "./screenshot-wide.png",
    "./screenshot-mobile.png",
)

IMAGE_EXTENSIONS: frozenset[str] = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg", "ico"})


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_timeout(name: str) -> float | None:
    raw = os.getenv(name)
    return float(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Storage backend: "redis" (durable) or "memory"
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis")
    cache_namespace: str = os.getenv("CACHE_NAMESPACE", "cachestorage")

    # Cache
    cache_prefix: str = os.getenv("CACHE_PREFIX", "units-hub")
    cache_version: str = os.getenv("CACHE_VERSION", "v2.1.0")
    cache_max_age: int = int(os.getenv("CACHE_MAX_AGE", str(30 * 24 * 60 * 60)))  # 30 days
    max_dynamic_items: int = int(os.getenv("MAX_DYNAMIC_ITEMS", "50"))
    core_assets: tuple[str, ...] = _env_list("CORE_ASSETS", CORE_ASSETS)
    optional_assets: tuple[str, ...] = _env_list("OPTIONAL_ASSETS", OPTIONAL_ASSETS)

    # Origin the application is served from
    app_origin: str = os.getenv("APP_ORIGIN", "http://localhost:8080")
    app_scope: str = os.getenv("APP_SCOPE", "/")

    # Network (no timeout unless configured)
    network_timeout: float | None = _env_timeout("NETWORK_TIMEOUT")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = _env_bool("API_RELOAD", "false")
    auto_install: bool = _env_bool("AUTO_INSTALL", "true")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in ("redis", "memory"):
            raise ValueError(f"CACHE_BACKEND must be 'redis' or 'memory', got {self.cache_backend!r}")

        if self.max_dynamic_items < 0:
            raise ValueError("MAX_DYNAMIC_ITEMS must be zero or positive")

        if self.cache_max_age < 0:
            raise ValueError("CACHE_MAX_AGE must be zero (disabled) or positive")

        if not self.core_assets:
            raise ValueError("CORE_ASSETS must contain at least one path")


@dataclass(frozen=True)
class CacheConfig:
    """Immutable cache configuration shared by every component.

    Built once at startup (usually with `from_settings`) and passed to each
    constructor, so the version string, partition names and asset lists have
    a single source of truth.

    Attributes:
        prefix: Application cache-name prefix (e.g. "units-hub")
        version: Current build identifier embedded in partition names
        base_url: Absolute URL the application is served from
        core_assets: Paths that must be cached for the shell to work offline
        optional_assets: Paths cached best effort into the image partition
        max_dynamic_items: Entry bound for the dynamic partition
        max_age: Age in seconds after which dynamic entries expire (0 disables)
    """

    prefix: str = "units-hub"
    version: str = "v2.1.0"
    base_url: str = "http://localhost:8080/"
    core_assets: tuple[str, ...] = CORE_ASSETS
    optional_assets: tuple[str, ...] = OPTIONAL_ASSETS
    image_extensions: frozenset[str] = IMAGE_EXTENSIONS
    max_dynamic_items: int = 50
    max_age: int = 30 * 24 * 60 * 60
    shell_asset: str = "./index.html"
    placeholder_asset: str = "./icon-192.png"
    sync_tag: str = "background-sync-conversions"
    periodic_sync_tag: str = "update-cache"
    notification_title: str = "Sourish Units Hub"
    notification_body: str = "New update available!"
    notification_vibrate: tuple[int, ...] = field(default=(200, 100, 200))

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheConfig":
        """Build the cache configuration from environment settings."""
        scope = settings.app_scope if settings.app_scope.endswith("/") else f"{settings.app_scope}/"
        return cls(
            prefix=settings.cache_prefix,
            version=settings.cache_version,
            base_url=urljoin(settings.app_origin, scope),
            core_assets=settings.core_assets,
            optional_assets=settings.optional_assets,
            max_dynamic_items=settings.max_dynamic_items,
            max_age=settings.cache_max_age,
        )

    def partition_name(self, kind: PartitionKind) -> str:
        """Return the versioned partition name, e.g. units-hub-static-v2.1.0."""
        return f"{self.prefix}-{kind.value}-{self.version}"

    @property
    def current_partitions(self) -> frozenset[str]:
        """Names of the three partitions owned by this version."""
        return frozenset(self.partition_name(kind) for kind in PartitionKind)

    @property
    def partition_prefix(self) -> str:
        return f"{self.prefix}-"

    def resolve(self, asset: str) -> str:
        """Resolve a relative asset path against the application base URL."""
        return urljoin(self.base_url, asset)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def get_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Create an asyncio Redis client instance."""
    settings = settings or get_settings()
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
