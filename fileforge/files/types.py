"""
File tree type definitions and Pydantic models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class FileKind(str, Enum):
    """Kind of a record in the file tree"""

    FOLDER = "folder"
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    CODE = "code"
    PDF = "pdf"
    UNKNOWN = "unknown"


class Action(str, Enum):
    """Actions the permission gate decides on"""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ENCRYPT = "encrypt"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileRecord(BaseModel):
    """A single file or folder in the tree"""

    id: str
    name: str
    kind: FileKind
    size: int = Field(default=0, ge=0)
    modified_at: datetime = Field(default_factory=utcnow)
    content: Optional[str] = None  # Always None for folders
    parent_id: Optional[str] = None  # None only for the root record
    is_encrypted: bool = False
    permissions: Optional[str] = None  # Free-form token such as "644"
    owner: Optional[str] = None
    last_accessed_by: Optional[str] = None
    version: Optional[int] = None
    original_id: Optional[str] = None  # Source record of a compressed archive

    @field_validator("modified_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_folder(self) -> bool:
        return self.kind == FileKind.FOLDER


class UserRole(BaseModel):
    """Static role with a fixed set of action permissions"""

    id: str
    name: str
    permissions: Dict[Action, bool]


# Operation outcomes
class ErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    TRANSFORM_FAILURE = "transform_failure"
    CONFLICT = "conflict"


class OperationResult(BaseModel):
    """Outcome of a file operation, mirrored by the notification it emits"""

    success: bool
    message: str
    error: Optional[ErrorKind] = None
    file_ids: List[str] = Field(default_factory=list)  # Created or affected records
    data: Any = None
    persisted: bool = True  # False when the snapshot write failed


# Request models used by the HTTP interface
class CreateFileRequest(BaseModel):
    name: str
    parent_id: str
    kind: Optional[FileKind] = None  # Inferred from the name when omitted
    content: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)


class RenameFileRequest(BaseModel):
    new_name: str


class FileContent(BaseModel):
    content: str


class BatchRequest(BaseModel):
    ids: List[str]


class TransferRequest(BaseModel):
    """Move or copy a batch of records into a target folder"""

    ids: List[str]
    target_id: str


class PassphraseRequest(BaseModel):
    passphrase: str


class PermissionsRequest(BaseModel):
    permissions: str


class ContentSearchRequest(BaseModel):
    query: str


class FileListResponse(BaseModel):
    items: List[FileRecord]
    current_directory: Optional[str]
    search_term: str = ""


class BreadcrumbItem(BaseModel):
    id: str
    name: str


class NavigationState(BaseModel):
    current_directory: Optional[str]
    selection: List[str]
    search_term: str
    is_loading: bool


class SessionRole(BaseModel):
    role_id: str
