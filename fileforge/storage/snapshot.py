"""
Serialization of the whole file tree to a single storage slot.

Current layout::

    {"schema_version": 1, "version": 7, "files": [{...FileRecord...}, ...]}

Snapshots written before the schema field existed are a bare JSON array of
camelCase records (``parent``, ``type``, ``modified``, ``isEncrypted``); they
are upgraded on load.
"""

import json
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..files.constants import SNAPSHOT_SCHEMA_VERSION
from ..files.errors import StorageError
from ..files.types import FileRecord

_LEGACY_KEYS = {
    "type": "kind",
    "modified": "modified_at",
    "parent": "parent_id",
    "isEncrypted": "is_encrypted",
    "lastAccessedBy": "last_accessed_by",
}


class TreeSnapshot(BaseModel):
    schema_version: int = SNAPSHOT_SCHEMA_VERSION
    version: int = 0
    files: List[FileRecord] = Field(default_factory=list)


def _upgrade_legacy_record(item: Dict[str, Any]) -> Dict[str, Any]:
    return {_LEGACY_KEYS.get(key, key): value for key, value in item.items()}


def dump_snapshot(records: List[FileRecord], version: int) -> str:
    snapshot = TreeSnapshot(version=version, files=records)
    return snapshot.model_dump_json()


def load_snapshot(raw: str) -> Tuple[List[FileRecord], int]:
    """Parse a stored snapshot into records and the tree version.

    Raises:
        StorageError: If the payload is not a readable snapshot
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Snapshot is not valid JSON: {e}") from e

    if isinstance(data, list):
        data = {
            "schema_version": SNAPSHOT_SCHEMA_VERSION,
            "version": 0,
            "files": [
                _upgrade_legacy_record(item) if isinstance(item, dict) else item
                for item in data
            ],
        }

    if not isinstance(data, dict):
        raise StorageError("Snapshot must be a JSON object or array")

    schema_version = data.get("schema_version")
    if isinstance(schema_version, int) and schema_version > SNAPSHOT_SCHEMA_VERSION:
        raise StorageError(
            f"Snapshot schema version {schema_version} is newer than supported "
            f"version {SNAPSHOT_SCHEMA_VERSION}"
        )

    try:
        snapshot = TreeSnapshot.model_validate(data)
    except ValidationError as e:
        raise StorageError(f"Snapshot failed validation: {e}") from e

    return snapshot.files, snapshot.version
