from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..files.errors import StorageError
from ..models import Base, StorageSlot


class DatabaseStorage:
    """Key/value storage in a SQL table, one row per slot."""

    def __init__(self, database_url: str, echo: bool = False):
        # For SQLite, we need to use aiosqlite driver
        async_database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        self.engine = create_async_engine(async_database_url, echo=echo)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self._initialized = False

    async def init_db(self) -> None:
        """Create tables if they do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._initialized = True

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.init_db()

    async def load(self, key: str) -> Optional[str]:
        try:
            await self._ensure_initialized()
            async with self.session_factory() as session:
                slot = await session.get(StorageSlot, key)
                return slot.value if slot is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Unable to load slot '{key}': {e}") from e

    async def save(self, key: str, value: str) -> None:
        try:
            await self._ensure_initialized()
            async with self.session_factory() as session:
                slot = await session.get(StorageSlot, key)
                if slot is None:
                    session.add(StorageSlot(key=key, value=value))
                else:
                    slot.value = value
                    slot.updated_at = datetime.now(timezone.utc)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Unable to save slot '{key}': {e}") from e

    async def dispose(self) -> None:
        await self.engine.dispose()
