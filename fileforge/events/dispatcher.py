"""Event dispatcher - dispatches typed events to registered handlers.

This is a simple event system without persistence.
Each event type has its own handler function with proper typing.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, List, Set, TypeVar, Union

from ..logger import logger
from .base import (
    BaseEvent,
    NavigationChangedEvent,
    NotificationEvent,
    TreeChangedEvent,
)
from .types import EventType

# Generic type variable for event types
EventT = TypeVar("EventT", bound=BaseEvent)

# Generic handler type that can be sync or async for any event type
EventHandler = Union[Callable[[EventT], None], Callable[[EventT], Awaitable[None]]]


class EventDispatcher:
    """Dispatches events to registered handlers.

    Async handlers run as tasks, sync handlers in a worker thread.
    A failing handler is logged and does not affect the others.
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[Callable]] = {
            event_type: [] for event_type in EventType
        }
        # Keeps fire-and-forget dispatches alive until they finish
        self._pending: Set[asyncio.Task] = set()

    # Registration methods - one per event type for type safety

    def on_notification(self, handler: EventHandler[NotificationEvent]) -> None:
        """Register handler for operation notifications."""
        self._handlers[EventType.NOTIFICATION].append(handler)

    def on_tree_changed(self, handler: EventHandler[TreeChangedEvent]) -> None:
        """Register handler for committed tree changes."""
        self._handlers[EventType.TREE_CHANGED].append(handler)

    def on_navigation_changed(
        self, handler: EventHandler[NavigationChangedEvent]
    ) -> None:
        """Register handler for navigation and selection changes."""
        self._handlers[EventType.NAVIGATION_CHANGED].append(handler)

    def remove_handler(self, event_type: EventType, handler: Callable) -> bool:
        """Unregister a handler, returns True if it was registered."""
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    # Dispatch methods - one per event type for type safety

    async def dispatch_notification(self, event: NotificationEvent) -> None:
        """Dispatch an operation notification."""
        await self._dispatch_event(event)

    async def dispatch_tree_changed(self, event: TreeChangedEvent) -> None:
        """Dispatch a tree change."""
        await self._dispatch_event(event)

    def dispatch_navigation_changed(self, event: NavigationChangedEvent) -> None:
        """Schedule a navigation change without waiting for handlers.

        Navigation is driven by synchronous calls, so handlers are run in the
        background when an event loop is running and skipped otherwise.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, dropping event: {event.event_type}")
            return

        task = loop.create_task(self._dispatch_event(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # Internal dispatch logic

    async def _dispatch_event(self, event: BaseEvent) -> None:
        """Dispatch event to all registered handlers.

        Args:
            event: Event to dispatch
        """
        handlers = list(self._handlers.get(event.event_type, []))

        if not handlers:
            logger.debug(f"No handlers registered for event: {event.event_type}")
            return

        tasks = []
        for handler in handlers:
            if inspect.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(event)))
            else:
                tasks.append(asyncio.create_task(asyncio.to_thread(handler, event)))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!r} failed for "
                    f"event {event.event_type}: {result}",
                    exc_info=result,
                )


# Global event dispatcher instance
event_dispatcher = EventDispatcher()
