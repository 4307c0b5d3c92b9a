"""
Persistence adapters for the file tree snapshot.
"""

from ..config import StorageSettings
from .base import StorageAdapter
from .database import DatabaseStorage
from .json_file import JsonFileStorage
from .memory import MemoryStorage
from .snapshot import TreeSnapshot, dump_snapshot, load_snapshot


def create_storage(storage_settings: StorageSettings) -> StorageAdapter:
    """Build the adapter selected by configuration."""
    match storage_settings.backend:
        case "database":
            return DatabaseStorage(storage_settings.database_url)
        case "memory":
            return MemoryStorage()
        case _:
            return JsonFileStorage(storage_settings.json_path)


__all__ = [
    "DatabaseStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "StorageAdapter",
    "TreeSnapshot",
    "create_storage",
    "dump_snapshot",
    "load_snapshot",
]
