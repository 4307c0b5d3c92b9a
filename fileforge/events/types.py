"""Event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """All event types in the system."""

    # Human-readable outcome of an operation (toast side channel)
    NOTIFICATION = "file.notification"

    # Store and view state
    TREE_CHANGED = "tree.changed"
    NAVIGATION_CHANGED = "navigation.changed"
