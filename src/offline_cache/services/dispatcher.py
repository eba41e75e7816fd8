"""Event dispatcher for worker lifecycle hooks."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from offline_cache.entities import WorkerEvent
from offline_cache.exceptions import UnhandledEventError

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=WorkerEvent)
EventHandler = Callable[[Any], Awaitable[Any]]


class EventDispatcher:
    """Routes each event type to exactly one async handler.

    `dispatch` awaits the handler, so the host runtime only reports an
    event as handled once everything the handler started has completed.

    Example:
        ```python
        dispatcher = EventDispatcher()

        @dispatcher.on(InstallEvent)
        async def on_install(event: InstallEvent) -> None:
            ...

        await dispatcher.dispatch(InstallEvent())
        ```
    """

    def __init__(self) -> None:
        self._handlers: dict[type[WorkerEvent], EventHandler] = {}

    def register(self, event_type: type[EventT], handler: Callable[[EventT], Awaitable[Any]]) -> None:
        """Register the handler for an event type, replacing any previous one."""
        self._handlers[event_type] = handler

    def on(self, event_type: type[EventT]) -> Callable[[Callable[[EventT], Awaitable[Any]]], Callable[[EventT], Awaitable[Any]]]:
        """Decorator form of `register`."""

        def decorator(handler: Callable[[EventT], Awaitable[Any]]) -> Callable[[EventT], Awaitable[Any]]:
            self.register(event_type, handler)
            return handler

        return decorator

    def handles(self, event_type: type[WorkerEvent]) -> bool:
        return event_type in self._handlers

    async def dispatch(self, event: WorkerEvent) -> Any:
        """Deliver an event and wait for its handler to finish.

        Args:
            event: The event to deliver

        Returns:
            Whatever the handler returns

        Raises:
            UnhandledEventError: If no handler is registered for the event type
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise UnhandledEventError(f"No handler registered for {event.name or type(event).__name__} events")
        logger.debug("Dispatching %s event", event.name)
        return await handler(event)
