"""
Virtual file tree: records, permission gate, store, navigation and operations.

The leaf modules are re-exported here. ``TreeStore``, ``Navigator`` and
``FileManager`` live in ``store``, ``navigation`` and ``manager`` and are
imported from there, since they depend on the storage and event packages
which themselves use these types.
"""

from .constants import DEFAULT_ROLES, ROOT_ID, default_files
from .errors import (
    ConcurrentModificationError,
    FileOperationError,
    InvalidState,
    NotFound,
    PermissionDenied,
    StorageError,
    TransformFailure,
)
from .transforms import decrypt, encrypt, kind_from_name
from .types import (
    Action,
    ErrorKind,
    FileKind,
    FileRecord,
    OperationResult,
    UserRole,
)

__all__ = [
    # Types
    "Action",
    "ErrorKind",
    "FileKind",
    "FileRecord",
    "OperationResult",
    "UserRole",
    # Seed data
    "DEFAULT_ROLES",
    "ROOT_ID",
    "default_files",
    # Errors
    "ConcurrentModificationError",
    "FileOperationError",
    "InvalidState",
    "NotFound",
    "PermissionDenied",
    "StorageError",
    "TransformFailure",
    # Transforms
    "decrypt",
    "encrypt",
    "kind_from_name",
]
