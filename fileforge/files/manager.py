"""
File operations over the tree store.

Every operation:
- waits ``latency`` seconds, standing in for a round trip to remote storage
- checks the permission gate and structural preconditions
- computes a whole new record collection and commits it in one replacement
- reports its outcome as an ``OperationResult`` and a ``NotificationEvent``

Recoverable failures never raise out of an operation; the store is left
untouched and a destructive notification is emitted instead. Mutations are
serialized by a single lock, and each commit is checked against the tree
version it was computed from.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Literal, Optional

from ..background_tasks import OperationRunner, OperationType
from ..config import settings
from ..events import EventDispatcher, NotificationEvent, TreeChangedEvent, event_dispatcher
from ..logger import logger
from . import transforms
from .constants import (
    ARCHIVE_SUFFIX,
    BACKUP_SUFFIX,
    COPY_SUFFIX,
    DECOMPRESSED_PREFIX,
)
from .errors import FileOperationError, InvalidState, NotFound, PermissionDenied
from .navigation import Navigator
from .permissions import PermissionGate
from .store import TreeStore
from .types import Action, FileKind, FileRecord, OperationResult, utcnow

_PERMISSIONS_PATTERN = re.compile(r"^[0-7]{3}$")


@dataclass
class _Outcome:
    """What a successful operation wants committed and reported."""

    title: str
    message: str
    records: Optional[List[FileRecord]] = None  # None for operations that only read
    file_ids: List[str] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    data: Any = None


def _plural(count: int) -> str:
    return f"{count} {'file' if count == 1 else 'files'}"


def _content_size(content: Optional[str]) -> int:
    return len(content.encode("utf-8")) if content else 0


class FileManager:
    """Operation interface over a TreeStore, guarded by a PermissionGate."""

    def __init__(
        self,
        store: TreeStore,
        gate: Optional[PermissionGate] = None,
        dispatcher: Optional[EventDispatcher] = None,
        latency: Optional[float] = None,
    ):
        self.store = store
        self.gate = gate or PermissionGate(settings.default_role)
        self.dispatcher = dispatcher or event_dispatcher
        self.latency = settings.operation_latency if latency is None else latency
        self.navigator = Navigator(
            store, on_change=self.dispatcher.dispatch_navigation_changed
        )
        self.runner = OperationRunner()
        self._lock = asyncio.Lock()
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0 or self.runner.is_busy

    async def load(self) -> None:
        await self.store.load()

    def check_access(self, file_id: Optional[str], action: Action | str) -> bool:
        return self.gate.check_access(file_id, action)

    # Helpers shared by the operations

    def _require(self, file_id: str) -> FileRecord:
        record = self.store.get(file_id)
        if record is None:
            raise NotFound("The selected file could not be found.", file_id=file_id)
        return record

    def _require_access(self, file_id: Optional[str], action: Action, message: str) -> None:
        if not self.gate.check_access(file_id, action):
            raise PermissionDenied(message, file_id=file_id)

    def _require_folder(self, folder_id: str) -> FileRecord:
        folder = self.store.get(folder_id)
        if folder is None:
            raise NotFound("The target folder could not be found.", file_id=folder_id)
        if not folder.is_folder:
            raise InvalidState(f"{folder.name} is not a folder.", file_id=folder_id)
        return folder

    def _require_batch(self, ids: List[str], action: Action, message: str) -> List[FileRecord]:
        """Check every id of a batch before anything is touched."""
        if not ids:
            raise InvalidState("No files selected.")
        for file_id in ids:
            self._require_access(file_id, action, message)
        return [self._require(file_id) for file_id in dict.fromkeys(ids)]

    def _with_updated(self, updated: Iterable[FileRecord]) -> List[FileRecord]:
        by_id = {record.id: record for record in updated}
        return [by_id.get(record.id, record) for record in self.store.records]

    def _sibling(self, source: FileRecord, **changes) -> FileRecord:
        """Copy of ``source`` with a fresh id and timestamp."""
        return source.model_copy(
            update={"id": self.store.new_id(), "modified_at": utcnow(), **changes}
        )

    async def _notify(
        self,
        title: str,
        description: str,
        operation: OperationType,
        variant: Literal["default", "destructive"] = "default",
    ) -> None:
        await self.dispatcher.dispatch_notification(
            NotificationEvent(
                title=title,
                description=description,
                variant=variant,
                operation=operation.value,
            )
        )

    async def _run(
        self, operation: OperationType, apply: Callable[[], _Outcome]
    ) -> OperationResult:
        """Operation boundary: latency, serialized apply/commit, reporting."""
        self._in_flight += 1
        try:
            await asyncio.sleep(self.latency)
            async with self._lock:
                version = self.store.version
                try:
                    outcome = apply()
                    persisted = True
                    if outcome.records is not None:
                        persisted = await self.store.commit(
                            outcome.records, expected_version=version
                        )
                except FileOperationError as e:
                    logger.warning(f"{operation.value} failed: {e.message}")
                    await self._notify(e.title, e.message, operation, "destructive")
                    return OperationResult(
                        success=False,
                        message=e.message,
                        error=e.kind,
                        file_ids=[e.file_id] if e.file_id else [],
                    )

            for line in outcome.log:
                logger.info(line)

            if outcome.records is not None:
                await self.dispatcher.dispatch_tree_changed(
                    TreeChangedEvent(
                        version=self.store.version,
                        operation=operation.value,
                        file_ids=outcome.file_ids,
                    )
                )
            if not persisted:
                await self._notify(
                    "Storage Error",
                    "Changes were applied but could not be saved to storage.",
                    operation,
                    "destructive",
                )
            await self._notify(outcome.title, outcome.message, operation)

            return OperationResult(
                success=True,
                message=outcome.message,
                file_ids=outcome.file_ids,
                data=outcome.data,
                persisted=persisted,
            )
        finally:
            self._in_flight -= 1

    # Basic operations

    async def create(
        self,
        name: str,
        parent_id: str,
        kind: Optional[FileKind] = None,
        content: Optional[str] = None,
        size: Optional[int] = None,
    ) -> OperationResult:
        """Create a file or folder under ``parent_id``; kind defaults to a guess from the name."""

        def apply() -> _Outcome:
            self._require_access(
                parent_id,
                Action.WRITE,
                "You don't have permission to create files in this directory.",
            )
            self._require_folder(parent_id)
            if not name.strip():
                raise InvalidState("File name must not be empty.")
            if size is not None and size < 0:
                raise InvalidState("File size must not be negative.")

            record_kind = kind or transforms.kind_from_name(name)
            is_folder = record_kind == FileKind.FOLDER
            record = FileRecord(
                id=self.store.new_id(),
                name=name,
                kind=record_kind,
                size=0 if is_folder else (size if size is not None else _content_size(content)),
                content=None if is_folder else content,
                parent_id=parent_id,
            )
            return _Outcome(
                title="File Created",
                message=f"{name} has been created successfully.",
                records=[*self.store.records, record],
                file_ids=[record.id],
                log=[f"Create: {name}"],
                data=record,
            )

        return await self._run(OperationType.CREATE, apply)

    async def rename(self, file_id: str, new_name: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.WRITE, "You don't have permission to rename this file."
            )
            if not new_name.strip():
                raise InvalidState("File name must not be empty.", file_id=file_id)

            renamed = record.model_copy(update={"name": new_name})
            return _Outcome(
                title="File Renamed",
                message=f"File renamed to {new_name} successfully.",
                records=self._with_updated([renamed]),
                file_ids=[file_id],
                log=[f"Rename: {record.name} to {new_name}"],
                data=renamed,
            )

        return await self._run(OperationType.RENAME, apply)

    async def edit_content(self, file_id: str, content: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.WRITE, "You don't have permission to edit this file."
            )
            if record.is_folder:
                raise InvalidState(
                    "Cannot edit the content of a folder.", file_id=file_id
                )

            edited = record.model_copy(
                update={
                    "content": content,
                    "size": _content_size(content),
                    "modified_at": utcnow(),
                }
            )
            return _Outcome(
                title="File Edited",
                message="File content has been updated successfully.",
                records=self._with_updated([edited]),
                file_ids=[file_id],
                log=[f"Edit: {record.name}"],
                data=edited,
            )

        return await self._run(OperationType.EDIT_CONTENT, apply)

    async def clear_content(self, file_id: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.WRITE, "You don't have permission to clear this file."
            )
            if record.is_folder:
                raise InvalidState(
                    "Cannot clear the content of a folder.", file_id=file_id
                )

            cleared = record.model_copy(
                update={
                    "content": "",
                    "size": 0,
                    "is_encrypted": False,
                    "modified_at": utcnow(),
                }
            )
            return _Outcome(
                title="File Cleared",
                message=f"{record.name} content has been cleared.",
                records=self._with_updated([cleared]),
                file_ids=[file_id],
                log=[f"Clear: {record.name}"],
                data=cleared,
            )

        return await self._run(OperationType.CLEAR_CONTENT, apply)

    # Batch operations

    async def delete(self, ids: List[str]) -> OperationResult:
        """Delete the records and, for folders, everything below them."""

        def apply() -> _Outcome:
            targets = self._require_batch(
                ids,
                Action.DELETE,
                "You don't have permission to delete one or more selected files.",
            )
            doomed = set()
            for target in targets:
                doomed.add(target.id)
                doomed |= self.store.descendant_ids(target.id)

            remaining = [r for r in self.store.records if r.id not in doomed]
            return _Outcome(
                title="Files Deleted",
                message=f"{_plural(len(targets))} deleted successfully.",
                records=remaining,
                file_ids=sorted(doomed),
                log=[f"Delete: {target.name}" for target in targets],
            )

        result = await self._run(OperationType.DELETE, apply)
        if result.success:
            self.navigator.clear_selection()
        return result

    async def move(self, ids: List[str], target_id: str) -> OperationResult:
        def apply() -> _Outcome:
            targets = self._require_batch(
                ids,
                Action.WRITE,
                "You don't have permission to move one or more selected files.",
            )
            folder = self._require_folder(target_id)
            for target in targets:
                if target.id == target_id or target_id in self.store.descendant_ids(
                    target.id
                ):
                    raise InvalidState(
                        f"Cannot move {target.name} into itself or one of its subfolders.",
                        file_id=target.id,
                        title="Move Failed",
                    )

            moved = [t.model_copy(update={"parent_id": target_id}) for t in targets]
            return _Outcome(
                title="Files Moved",
                message=f"{_plural(len(moved))} moved successfully.",
                records=self._with_updated(moved),
                file_ids=[m.id for m in moved],
                log=[f"Move: {t.name} to {folder.name}" for t in targets],
            )

        result = await self._run(OperationType.MOVE, apply)
        if result.success:
            self.navigator.clear_selection()
        return result

    async def copy(self, ids: List[str], target_id: str) -> OperationResult:
        """Copy records into ``target_id``; folder copies do not include their children."""

        def apply() -> _Outcome:
            targets = self._require_batch(
                ids,
                Action.READ,
                "You don't have permission to copy one or more selected files.",
            )
            folder = self._require_folder(target_id)

            copies = [
                self._sibling(t, name=f"{t.name}{COPY_SUFFIX}", parent_id=target_id)
                for t in targets
            ]
            return _Outcome(
                title="Files Copied",
                message=f"{_plural(len(copies))} copied successfully.",
                records=[*self.store.records, *copies],
                file_ids=[c.id for c in copies],
                log=[f"Copy: {t.name} to {folder.name}" for t in targets],
                data=copies,
            )

        return await self._run(OperationType.COPY, apply)

    # Protection

    async def encrypt_file(self, file_id: str, passphrase: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.ENCRYPT, "You don't have permission to encrypt this file."
            )
            if record.is_folder or not record.content:
                raise InvalidState(
                    "Cannot encrypt a file without content.",
                    file_id=file_id,
                    title="Encryption Failed",
                )
            if record.is_encrypted:
                raise InvalidState(
                    "This file is already encrypted.",
                    file_id=file_id,
                    title="Encryption Failed",
                )
            if not passphrase:
                raise InvalidState(
                    "A password is required.", file_id=file_id, title="Encryption Failed"
                )

            encrypted = record.model_copy(
                update={
                    "content": transforms.encrypt(record.content, passphrase),
                    "is_encrypted": True,
                    "modified_at": utcnow(),
                }
            )
            return _Outcome(
                title="File Encrypted",
                message=f"{record.name} has been encrypted successfully.",
                records=self._with_updated([encrypted]),
                file_ids=[file_id],
                log=[f"Encrypt: {record.name}"],
            )

        return await self._run(OperationType.ENCRYPT, apply)

    async def decrypt_file(self, file_id: str, passphrase: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.ENCRYPT, "You don't have permission to decrypt this file."
            )
            if not record.content or not record.is_encrypted:
                raise InvalidState(
                    "This file is not encrypted.",
                    file_id=file_id,
                    title="Decryption Failed",
                )
            if not passphrase:
                raise InvalidState(
                    "A password is required.", file_id=file_id, title="Decryption Failed"
                )

            try:
                plain = transforms.decrypt(record.content, passphrase)
            except FileOperationError as e:
                e.file_id = file_id
                raise

            decrypted = record.model_copy(
                update={"content": plain, "is_encrypted": False, "modified_at": utcnow()}
            )
            return _Outcome(
                title="File Decrypted",
                message=f"{record.name} has been decrypted successfully.",
                records=self._with_updated([decrypted]),
                file_ids=[file_id],
                log=[f"Decrypt: {record.name}"],
            )

        return await self._run(OperationType.DECRYPT, apply)

    async def change_permissions(self, file_id: str, permissions: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id,
                Action.WRITE,
                "You don't have permission to change this file's permissions.",
            )
            if not _PERMISSIONS_PATTERN.match(permissions):
                raise InvalidState(
                    "Permissions must be three octal digits, for example 644.",
                    file_id=file_id,
                )

            changed = record.model_copy(
                update={"permissions": permissions, "modified_at": utcnow()}
            )
            return _Outcome(
                title="Permissions Changed",
                message=f"{record.name} permissions updated to {permissions}.",
                records=self._with_updated([changed]),
                file_ids=[file_id],
                log=[f"Change Permissions: {record.name} to {permissions}"],
            )

        return await self._run(OperationType.CHANGE_PERMISSIONS, apply)

    async def backup_file(self, file_id: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.READ, "You don't have permission to backup this file."
            )

            backup = self._sibling(record, name=f"{record.name}{BACKUP_SUFFIX}")
            return _Outcome(
                title="File Backed Up",
                message=f"{record.name} has been backed up as {backup.name}.",
                records=[*self.store.records, backup],
                file_ids=[backup.id],
                log=[f"Backup: {record.name}"],
                data=backup,
            )

        return await self._run(OperationType.BACKUP, apply)

    # Content transforms

    async def compress_file(self, file_id: str) -> OperationResult:
        """Add a simulated ``.gz`` archive of the file next to it."""

        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.WRITE, "You don't have permission to compress this file."
            )
            if record.is_folder or not record.content:
                raise InvalidState(
                    "Cannot compress this type of file.",
                    file_id=file_id,
                    title="Compression Failed",
                )

            archive = self._sibling(
                record,
                name=f"{record.name}{ARCHIVE_SUFFIX}",
                kind=FileKind.ARCHIVE,
                size=transforms.compressed_size(record.size),
                content=f"[Compressed content of {record.name}]",
                is_encrypted=False,
                original_id=record.id,
            )
            return _Outcome(
                title="File Compressed",
                message=f"{record.name} has been compressed as {archive.name}.",
                records=[*self.store.records, archive],
                file_ids=[archive.id],
                log=[f"Compress: {record.name}"],
                data=archive,
            )

        return await self._run(OperationType.COMPRESS, apply)

    async def decompress_file(self, file_id: str) -> OperationResult:
        """Add a simulated extraction of an archive next to it.

        Sizes are scaled, not restored, so compressing then decompressing
        does not give back the original size.
        """

        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id,
                Action.WRITE,
                "You don't have permission to decompress this file.",
            )
            if record.kind != FileKind.ARCHIVE:
                raise InvalidState(
                    "This file is not an archive.",
                    file_id=file_id,
                    title="Decompression Failed",
                )

            if record.name.endswith(ARCHIVE_SUFFIX):
                name = record.name[: -len(ARCHIVE_SUFFIX)]
            else:
                name = f"{DECOMPRESSED_PREFIX}{record.name}"
            original = self.store.get(record.original_id) if record.original_id else None

            extracted = self._sibling(
                record,
                name=name,
                kind=original.kind if original else FileKind.DOCUMENT,
                size=transforms.decompressed_size(record.size),
                content=f"[Decompressed content of {record.name}]",
                original_id=None,
            )
            return _Outcome(
                title="File Decompressed",
                message=f"{record.name} has been decompressed as {extracted.name}.",
                records=[*self.store.records, extracted],
                file_ids=[extracted.id],
                log=[f"Decompress: {record.name}"],
                data=extracted,
            )

        return await self._run(OperationType.DECOMPRESS, apply)

    async def sort_content(self, file_id: str) -> OperationResult:
        def apply() -> _Outcome:
            record = self._require(file_id)
            self._require_access(
                file_id, Action.WRITE, "You don't have permission to sort this file."
            )
            if record.is_folder or not record.content:
                raise InvalidState(
                    "Cannot sort this type of file.", file_id=file_id, title="Sort Failed"
                )

            ordered = record.model_copy(
                update={
                    "content": transforms.sort_lines(record.content),
                    "modified_at": utcnow(),
                }
            )
            return _Outcome(
                title="File Sorted",
                message=f"{record.name} content has been sorted alphabetically.",
                records=self._with_updated([ordered]),
                file_ids=[file_id],
                log=[f"Sort: {record.name}"],
                data=ordered,
            )

        return await self._run(OperationType.SORT_CONTENT, apply)

    async def search_content(self, file_id: str, query: str) -> List[str]:
        """Matching ``"Line N: ..."`` entries; empty when denied, missing or empty."""
        record = self.store.get(file_id)
        if record is None or not self.gate.check_access(file_id, Action.READ):
            await self._notify(
                "Permission Denied",
                "You don't have permission to search this file.",
                OperationType.SEARCH_CONTENT,
                "destructive",
            )
            return []
        return transforms.search_lines(record.content or "", query)
