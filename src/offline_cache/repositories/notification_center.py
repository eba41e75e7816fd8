"""In-process notification center."""

import logging

from offline_cache.entities import Notification

logger = logging.getLogger(__name__)


class InMemoryNotificationCenter:
    """Keeps displayed notifications until they are closed.

    Satisfies the NotificationSink protocol. The host runtime reads
    `displayed` to render them.
    """

    def __init__(self) -> None:
        self._displayed: dict[str, Notification] = {}

    @property
    def displayed(self) -> list[Notification]:
        return list(self._displayed.values())

    async def show(self, notification: Notification) -> None:
        self._displayed[notification.notification_id] = notification
        logger.info("Showing notification %s: %s", notification.notification_id, notification.title)

    async def close(self, notification_id: str) -> bool:
        return self._displayed.pop(notification_id, None) is not None
