from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .files.manager import FileManager
from .files.permissions import PermissionGate
from .files.store import TreeStore
from .logger import logger
from .routers import files, navigation, session
from .storage import DatabaseStorage, create_storage


def build_file_manager() -> FileManager:
    """Wire a FileManager from configuration."""
    storage = create_storage(settings.storage)
    store = TreeStore(storage, key=settings.storage.key)
    return FileManager(store, PermissionGate(settings.default_role))


def create_app(manager: Optional[FileManager] = None) -> FastAPI:
    file_manager = manager or build_file_manager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up and loading the file tree...")
        await file_manager.load()
        logger.info("Startup complete.")
        yield
        if isinstance(file_manager.store.storage, DatabaseStorage):
            await file_manager.store.storage.dispose()

    api_app = FastAPI()
    api_app.state.file_manager = file_manager

    api_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_app.include_router(files.router)
    api_app.include_router(navigation.router)
    api_app.include_router(session.router)

    app = FastAPI(lifespan=lifespan, title="File Forge")
    app.state.file_manager = file_manager
    app.mount("/api", api_app)
    return app
