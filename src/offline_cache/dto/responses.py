"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class LifecycleResponse(BaseModel):
    """Response DTO for install and activate operations."""

    state: str = Field(..., description="Worker state after the step")
    version: str = Field(..., description="Cache version of the worker")
    message: str = Field(..., description="Human-readable status message")


class PartitionStats(BaseModel):
    """Entry count of a single partition."""

    name: str = Field(..., description="Partition name")
    entries: int = Field(..., description="Number of cached entries", ge=0)


class WorkerStatusResponse(BaseModel):
    """Response DTO for worker status."""

    state: str = Field(..., description="Lifecycle state")
    version: str = Field(..., description="Cache version")
    partitions: list[PartitionStats] = Field(default_factory=list)
    pending_revalidations: int = Field(..., description="Background revalidations in flight", ge=0)
    max_dynamic_items: int = Field(..., description="Entry bound of the dynamic partition", ge=0)


class EventResponse(BaseModel):
    """Response DTO for sync, periodic sync and push events."""

    event: str = Field(..., description="Event name")
    handled: bool = Field(..., description="Whether the worker acted on the event")
    detail: dict[str, Any] = Field(default_factory=dict)


class NotificationItem(BaseModel):
    """A displayed notification."""

    notification_id: str
    title: str
    body: str
    icon: str | None = None
    badge: str | None = None
    vibrate: list[int] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    actions: list[dict[str, str | None]] = Field(default_factory=list)


class ClientItem(BaseModel):
    """An open page known to the runtime."""

    client_id: str
    url: str
    controller: str | None = None
    focused: bool = False


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    storage_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    state: str = Field(..., description="Worker lifecycle state")
