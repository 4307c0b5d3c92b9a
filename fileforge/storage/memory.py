from typing import Dict, Optional


class MemoryStorage:
    """In-process storage; contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.slots: Dict[str, str] = dict(initial or {})

    async def load(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    async def save(self, key: str, value: str) -> None:
        self.slots[key] = value
