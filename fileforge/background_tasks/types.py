from enum import Enum


class OperationType(str, Enum):
    CREATE = "create"
    RENAME = "rename"
    EDIT_CONTENT = "edit_content"
    DELETE = "delete"
    MOVE = "move"
    COPY = "copy"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    CHANGE_PERMISSIONS = "change_permissions"
    BACKUP = "backup"
    COMPRESS = "compress"
    DECOMPRESS = "decompress"
    CLEAR_CONTENT = "clear_content"
    SORT_CONTENT = "sort_content"
    SEARCH_CONTENT = "search_content"


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
