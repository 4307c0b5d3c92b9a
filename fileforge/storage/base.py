from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Client-local key/value storage holding serialized snapshots.

    Implementations raise ``StorageError`` when a slot cannot be read or written.
    """

    async def load(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the slot is empty."""
        ...

    async def save(self, key: str, value: str) -> None:
        """Overwrite the slot with ``value``."""
        ...
