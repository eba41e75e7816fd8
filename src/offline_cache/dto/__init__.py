"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the runtime
endpoints. They are used for request/response validation and
serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    ClientRegistrationRequest,
    FetchRequest,
    NotificationClickRequest,
    PushEventRequest,
    SyncEventRequest,
)
from .responses import (
    ClientItem,
    EventResponse,
    HealthCheckResponse,
    LifecycleResponse,
    NotificationItem,
    PartitionStats,
    WorkerStatusResponse,
)

__all__ = [
    "ClientRegistrationRequest",
    "FetchRequest",
    "NotificationClickRequest",
    "PushEventRequest",
    "SyncEventRequest",
    "ClientItem",
    "EventResponse",
    "HealthCheckResponse",
    "LifecycleResponse",
    "NotificationItem",
    "PartitionStats",
    "WorkerStatusResponse",
]
