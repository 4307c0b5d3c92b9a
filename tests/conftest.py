"""Shared fixtures: an in-memory store wired to a FileManager with no latency."""

from typing import List

import pytest

from fileforge.events import EventDispatcher, NotificationEvent
from fileforge.files.manager import FileManager
from fileforge.files.permissions import PermissionGate
from fileforge.files.store import TreeStore
from fileforge.storage import MemoryStorage


@pytest.fixture
def dispatcher():
    """Fresh dispatcher so handlers never leak between tests."""
    return EventDispatcher()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
async def manager(storage, dispatcher):
    """FileManager over the bootstrap tree, acting as administrator."""
    store = TreeStore(storage)
    file_manager = FileManager(
        store, PermissionGate("admin"), dispatcher=dispatcher, latency=0
    )
    await file_manager.load()
    return file_manager


@pytest.fixture
def notifications(dispatcher) -> List[NotificationEvent]:
    """Collects every notification emitted through the dispatcher."""
    received: List[NotificationEvent] = []

    async def collect(event: NotificationEvent) -> None:
        received.append(event)

    dispatcher.on_notification(collect)
    return received
