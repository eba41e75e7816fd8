"""Domain entities for internal representation.

These are pure dataclasses (frozen) and enums used by services and
repositories. They are NOT used for API contracts - use DTOs from the dto
package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .client import ClientContext
from .events import (
    ActivateEvent,
    FetchEvent,
    InstallEvent,
    NotificationClickEvent,
    PeriodicSyncEvent,
    PushEvent,
    SyncEvent,
    WorkerEvent,
)
from .kinds import LifecycleState, PartitionKind, Strategy
from .notification import Notification, NotificationAction
from .request import ResourceRequest
from .response import CachedResponse

__all__ = [
    "ActivateEvent",
    "CachedResponse",
    "ClientContext",
    "FetchEvent",
    "InstallEvent",
    "LifecycleState",
    "Notification",
    "NotificationAction",
    "NotificationClickEvent",
    "PartitionKind",
    "PeriodicSyncEvent",
    "PushEvent",
    "ResourceRequest",
    "Strategy",
    "SyncEvent",
    "WorkerEvent",
]
