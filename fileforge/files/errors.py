"""
Exceptions raised inside file operations.

Operations raise these internally; the operation boundary in
``FileManager`` turns them into a failed ``OperationResult`` and a
destructive notification, so none of them escape to callers.
"""

from typing import Optional

from .types import ErrorKind


class FileOperationError(Exception):
    """Base class for recoverable file operation failures.

    Attributes:
        title: Short notification title shown to the user
        message: Human-readable description
        file_id: Record the failure relates to, if any
    """

    kind: ErrorKind
    default_title = "Operation Failed"

    def __init__(
        self, message: str, file_id: Optional[str] = None, title: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file_id = file_id
        self.title = title or self.default_title


class PermissionDenied(FileOperationError):
    kind = ErrorKind.PERMISSION_DENIED
    default_title = "Permission Denied"


class NotFound(FileOperationError):
    kind = ErrorKind.NOT_FOUND
    default_title = "File Not Found"


class InvalidState(FileOperationError):
    kind = ErrorKind.INVALID_STATE


class TransformFailure(FileOperationError):
    kind = ErrorKind.TRANSFORM_FAILURE
    default_title = "Decryption Failed"


class ConcurrentModificationError(FileOperationError):
    """The tree changed between reading it and committing a new version."""

    kind = ErrorKind.CONFLICT
    default_title = "Conflict"


class StorageError(Exception):
    """A snapshot could not be read from or written to storage."""
