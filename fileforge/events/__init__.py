"""
Event system for File Forge.

Provides a dispatcher that fans operation notifications and tree changes
out to registered handlers, such as a presentation layer's toast area.
"""

from .base import (
    BaseEvent,
    NavigationChangedEvent,
    NotificationEvent,
    TreeChangedEvent,
)
from .dispatcher import EventDispatcher, event_dispatcher
from .types import EventType

__all__ = [
    "BaseEvent",
    "EventDispatcher",
    "EventType",
    "NavigationChangedEvent",
    "NotificationEvent",
    "TreeChangedEvent",
    "event_dispatcher",
]
