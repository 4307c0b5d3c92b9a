"""
Storage backed by a single JSON file mapping slot names to values.
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, Optional

import aiofiles
from aiofiles import os as aioos

from ..files.errors import StorageError


class JsonFileStorage:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def _read_slots(self) -> Dict[str, str]:
        if not await aioos.path.exists(self.path):
            return {}

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise StorageError(f"Unable to read storage file {self.path}: {e}") from e

        if not raw.strip():
            return {}
        try:
            slots = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self.path} is corrupted: {e}") from e
        if not isinstance(slots, dict):
            raise StorageError(f"Storage file {self.path} does not hold an object")
        return slots

    async def load(self, key: str) -> Optional[str]:
        async with self._lock:
            slots = await self._read_slots()
        return slots.get(key)

    async def save(self, key: str, value: str) -> None:
        async with self._lock:
            slots = await self._read_slots()
            slots[key] = value

            # Write to a sibling file first so a failed write never truncates the store
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            try:
                await aioos.makedirs(self.path.parent, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(json.dumps(slots, ensure_ascii=False))
                await aioos.replace(tmp_path, self.path)
            except OSError as e:
                raise StorageError(f"Unable to write storage file {self.path}: {e}") from e
