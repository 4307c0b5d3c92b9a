"""
Seed data: the bootstrap tree and the static role table.
"""

from typing import List

from .types import Action, FileKind, FileRecord, UserRole, utcnow

ROOT_ID = "root"

COPY_SUFFIX = " (copy)"
BACKUP_SUFFIX = ".bak"
ARCHIVE_SUFFIX = ".gz"
DECOMPRESSED_PREFIX = "decompressed_"

COMPRESSION_RATIO = 0.7
DECOMPRESSION_RATIO = 1.3

# Bumped whenever the persisted snapshot layout changes
SNAPSHOT_SCHEMA_VERSION = 1


def default_files() -> List[FileRecord]:
    """Build a fresh copy of the bootstrap tree."""
    now = utcnow()
    return [
        FileRecord(
            id=ROOT_ID, name="Root", kind=FileKind.FOLDER, modified_at=now, parent_id=None
        ),
        FileRecord(
            id="documents",
            name="Documents",
            kind=FileKind.FOLDER,
            modified_at=now,
            parent_id=ROOT_ID,
        ),
        FileRecord(
            id="images",
            name="Images",
            kind=FileKind.FOLDER,
            modified_at=now,
            parent_id=ROOT_ID,
        ),
        FileRecord(
            id="readme",
            name="README.md",
            kind=FileKind.DOCUMENT,
            size=1024,
            modified_at=now,
            content="# File Forge Guardian\n\nA secure file management system",
            parent_id=ROOT_ID,
        ),
        FileRecord(
            id="profile",
            name="profile.jpg",
            kind=FileKind.IMAGE,
            size=5242880,
            modified_at=now,
            parent_id="images",
        ),
        FileRecord(
            id="report",
            name="Annual Report.pdf",
            kind=FileKind.PDF,
            size=3145728,
            modified_at=now,
            parent_id="documents",
        ),
    ]


DEFAULT_ROLES: List[UserRole] = [
    UserRole(
        id="admin",
        name="Administrator",
        permissions={
            Action.READ: True,
            Action.WRITE: True,
            Action.DELETE: True,
            Action.ENCRYPT: True,
        },
    ),
    UserRole(
        id="editor",
        name="Editor",
        permissions={
            Action.READ: True,
            Action.WRITE: True,
            Action.DELETE: False,
            Action.ENCRYPT: False,
        },
    ),
    UserRole(
        id="viewer",
        name="Viewer",
        permissions={
            Action.READ: True,
            Action.WRITE: False,
            Action.DELETE: False,
            Action.ENCRYPT: False,
        },
    ),
]
