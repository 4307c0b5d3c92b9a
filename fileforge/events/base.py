"""Base event model for all events."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .types import EventType


class BaseEvent(BaseModel):
    """Base class for all events."""

    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationEvent(BaseEvent):
    """Fired after every operation with a message meant for the user."""

    event_type: EventType = EventType.NOTIFICATION
    title: str = Field(..., description="Short notification title")
    description: str = Field(..., description="Notification body")
    variant: Literal["default", "destructive"] = Field(
        default="default", description="destructive for failures"
    )
    operation: Optional[str] = Field(default=None, description="Operation name")


class TreeChangedEvent(BaseEvent):
    """Fired after a new file collection has been committed."""

    event_type: EventType = EventType.TREE_CHANGED
    version: int = Field(..., description="Tree version after the change")
    operation: str = Field(..., description="Operation that changed the tree")
    file_ids: List[str] = Field(default_factory=list, description="Affected records")


class NavigationChangedEvent(BaseEvent):
    """Fired when the current directory, selection or search term changes."""

    event_type: EventType = EventType.NAVIGATION_CHANGED
    current_directory: Optional[str] = Field(..., description="Listed folder id")
    selection: List[str] = Field(default_factory=list, description="Selected ids")
    search_term: str = Field(default="", description="Active search term")
