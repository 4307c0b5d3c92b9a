"""
Authoritative in-memory collection of file records.
"""

import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from ..logger import log_exception, logger
from ..storage.base import StorageAdapter
from ..storage.snapshot import dump_snapshot, load_snapshot
from .constants import default_files
from .errors import ConcurrentModificationError
from .types import FileRecord


class TreeStore:
    """Ordered collection of records replaced wholesale on every change.

    Each replacement bumps ``version``; callers that read the tree, compute a
    new collection and commit it pass the version they read so a concurrent
    replacement is detected instead of silently overwritten.
    """

    def __init__(self, storage: StorageAdapter, key: str = "files"):
        self.storage = storage
        self.key = key
        self._records: List[FileRecord] = []
        self._index: Dict[str, FileRecord] = {}
        self._children: Dict[Optional[str], List[FileRecord]] = defaultdict(list)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    @property
    def records(self) -> List[FileRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._index

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, file_id: str) -> Optional[FileRecord]:
        return self._index.get(file_id)

    def children_of(self, parent_id: Optional[str]) -> List[FileRecord]:
        return list(self._children.get(parent_id, []))

    def descendant_ids(self, file_id: str) -> Set[str]:
        """Every record below ``file_id``, excluding ``file_id`` itself.

        Walks iteratively with a visited set, so a malformed tree that
        contains a parent cycle still terminates.
        """
        visited: Set[str] = {file_id}
        descendants: Set[str] = set()
        pending = [file_id]
        while pending:
            current = pending.pop()
            for child in self._children.get(current, []):
                if child.id in visited:
                    continue
                visited.add(child.id)
                descendants.add(child.id)
                pending.append(child.id)
        return descendants

    def replace(
        self, records: Iterable[FileRecord], expected_version: Optional[int] = None
    ) -> int:
        """Swap in a new collection and return the new version.

        Raises:
            ConcurrentModificationError: If ``expected_version`` is stale
            ValueError: If the collection contains duplicate ids
        """
        if expected_version is not None and expected_version != self._version:
            raise ConcurrentModificationError(
                f"File tree changed (expected version {expected_version}, "
                f"found {self._version}). Please retry."
            )

        new_records = list(records)
        index: Dict[str, FileRecord] = {}
        children: Dict[Optional[str], List[FileRecord]] = defaultdict(list)
        for record in new_records:
            if record.id in index:
                raise ValueError(f"Duplicate file id '{record.id}'")
            index[record.id] = record
            children[record.parent_id].append(record)

        self._records = new_records
        self._index = index
        self._children = children
        self._version += 1
        return self._version

    async def load(self) -> None:
        """Load the tree from storage, seeding the bootstrap tree on first run."""
        raw = await self.storage.load(self.key)
        if raw is None:
            logger.info("No stored file tree found, seeding default files")
            self.replace(default_files())
            await self.persist()
            return

        records, version = load_snapshot(raw)
        self.replace(records)
        self._version = version
        logger.info(f"Loaded {len(records)} files (tree version {version})")

    async def commit(
        self, records: Iterable[FileRecord], expected_version: Optional[int] = None
    ) -> bool:
        """Replace the collection and persist it.

        Returns whether the snapshot reached storage; the in-memory tree is
        updated either way.
        """
        self.replace(records, expected_version)
        return await self.persist()

    @log_exception("Failed to persist file tree to slot '{self.key}'", default_return=False)
    async def persist(self) -> bool:
        await self.storage.save(self.key, dump_snapshot(self._records, self._version))
        return True
