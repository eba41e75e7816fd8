"""Worker lifecycle events delivered by the host runtime."""

from dataclasses import dataclass
from typing import Any

from .request import ResourceRequest


class WorkerEvent:
    """Marker base class for events the dispatcher accepts."""

    name: str = ""


@dataclass(frozen=True)
class InstallEvent(WorkerEvent):
    name = "install"


@dataclass(frozen=True)
class ActivateEvent(WorkerEvent):
    name = "activate"


@dataclass(frozen=True)
class FetchEvent(WorkerEvent):
    request: ResourceRequest
    name = "fetch"


@dataclass(frozen=True)
class SyncEvent(WorkerEvent):
    tag: str
    name = "sync"


@dataclass(frozen=True)
class PeriodicSyncEvent(WorkerEvent):
    tag: str
    name = "periodicsync"


@dataclass(frozen=True)
class PushEvent(WorkerEvent):
    """A push message; `payload` is None when the push carried no data."""

    payload: dict[str, Any] | None = None
    name = "push"


@dataclass(frozen=True)
class NotificationClickEvent(WorkerEvent):
    notification_id: str
    action: str | None = None
    name = "notificationclick"
