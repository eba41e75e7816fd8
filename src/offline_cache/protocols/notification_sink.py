"""Notification display protocol."""

from typing import Protocol, runtime_checkable

from offline_cache.entities import Notification


@runtime_checkable
class NotificationSink(Protocol):
    async def show(self, notification: Notification) -> None:
        """Display a notification."""
        ...

    async def close(self, notification_id: str) -> bool:
        """Dismiss a displayed notification.

        Returns:
            True if the notification was displayed
        """
        ...
