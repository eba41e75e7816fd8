"""Notification domain entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NotificationAction:
    action: str
    title: str
    icon: str | None = None


@dataclass(frozen=True)
class Notification:
    """A notification shown in response to a push message.

    Attributes:
        notification_id: Identifier used to close the notification on click
        title: Notification title
        body: Notification text
        icon: Icon URL
        badge: Badge URL
        vibrate: Vibration pattern in milliseconds
        data: Arbitrary data forwarded from the push payload
        actions: Buttons offered with the notification
    """

    notification_id: str
    title: str
    body: str
    icon: str | None = None
    badge: str | None = None
    vibrate: tuple[int, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    actions: tuple[NotificationAction, ...] = ()
