from typing import Coroutine, List

from fastapi import APIRouter, Depends, HTTPException

from ..background_tasks import OperationTask, OperationType
from ..dependencies import ensure_success, get_file_manager
from ..files.manager import FileManager
from ..files.types import (
    Action,
    BatchRequest,
    BreadcrumbItem,
    ContentSearchRequest,
    CreateFileRequest,
    FileContent,
    FileListResponse,
    FileRecord,
    OperationResult,
    PassphraseRequest,
    PermissionsRequest,
    RenameFileRequest,
    TransferRequest,
)

router = APIRouter(
    prefix="/files",
    tags=["files"],
)


async def _execute(
    manager: FileManager,
    operation: OperationType,
    name: str,
    coro: Coroutine[None, None, OperationResult],
    background: bool,
) -> OperationResult | dict:
    """Await the operation, or hand it to the runner and return its task id."""
    if background:
        submitted = manager.runner.submit(operation, name, coro)
        return {"task_id": submitted.task_id}
    return ensure_success(await coro)


def _display_name(manager: FileManager, file_id: str) -> str:
    record = manager.store.get(file_id)
    return record.name if record else file_id


def _require_read(manager: FileManager, file_id: str | None) -> None:
    if not manager.check_access(file_id, Action.READ):
        raise HTTPException(
            status_code=403, detail="You don't have permission to view this file."
        )


# Listing endpoints
@router.get("", response_model=FileListResponse)
async def list_files(manager: FileManager = Depends(get_file_manager)):
    """List the current directory, or search results when a search term is set"""
    navigator = manager.navigator
    _require_read(manager, navigator.current_directory)
    return FileListResponse(
        items=navigator.visible_files(),
        current_directory=navigator.current_directory,
        search_term=navigator.search_term,
    )


@router.get("/tasks/{task_id}", response_model=OperationTask)
async def get_task(task_id: str, manager: FileManager = Depends(get_file_manager)):
    """Status of an operation submitted in the background"""
    task = manager.runner.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, manager: FileManager = Depends(get_file_manager)):
    """Forget a finished background operation"""
    if not manager.runner.remove_task(task_id):
        raise HTTPException(
            status_code=400, detail="Cannot delete task (still running or not found)"
        )
    return {"success": True}


@router.delete("/tasks")
async def clear_completed_tasks(manager: FileManager = Depends(get_file_manager)):
    """Forget every finished background operation"""
    return {"cleared": manager.runner.clear_completed()}


@router.get("/{file_id}", response_model=FileRecord)
async def get_file(file_id: str, manager: FileManager = Depends(get_file_manager)):
    _require_read(manager, file_id)
    record = manager.store.get(file_id)
    if record is None:
        raise HTTPException(status_code=404, detail="File not found")
    return record


@router.get("/{file_id}/children", response_model=List[FileRecord])
async def list_children(file_id: str, manager: FileManager = Depends(get_file_manager)):
    _require_read(manager, file_id)
    return manager.store.children_of(file_id)


@router.get("/{file_id}/breadcrumb", response_model=List[BreadcrumbItem])
async def get_breadcrumb(
    file_id: str, manager: FileManager = Depends(get_file_manager)
):
    _require_read(manager, file_id)
    return manager.navigator.breadcrumb(file_id)


# Mutation endpoints
@router.post("")
async def create_file(
    request: CreateFileRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    """Create a file or folder"""
    return await _execute(
        manager,
        OperationType.CREATE,
        request.name,
        manager.create(
            request.name,
            request.parent_id,
            kind=request.kind,
            content=request.content,
            size=request.size,
        ),
        background,
    )


@router.patch("/{file_id}/name")
async def rename_file(
    file_id: str,
    request: RenameFileRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.RENAME,
        _display_name(manager, file_id),
        manager.rename(file_id, request.new_name),
        background,
    )


@router.put("/{file_id}/content")
async def edit_file_content(
    file_id: str,
    file_content: FileContent,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.EDIT_CONTENT,
        _display_name(manager, file_id),
        manager.edit_content(file_id, file_content.content),
        background,
    )


@router.delete("/{file_id}/content")
async def clear_file_content(
    file_id: str,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.CLEAR_CONTENT,
        _display_name(manager, file_id),
        manager.clear_content(file_id),
        background,
    )


@router.post("/delete")
async def delete_files(
    request: BatchRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    """Delete files; folders are removed together with everything inside them"""
    return await _execute(
        manager,
        OperationType.DELETE,
        f"{len(request.ids)} files",
        manager.delete(request.ids),
        background,
    )


@router.post("/move")
async def move_files(
    request: TransferRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.MOVE,
        f"{len(request.ids)} files",
        manager.move(request.ids, request.target_id),
        background,
    )


@router.post("/copy")
async def copy_files(
    request: TransferRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.COPY,
        f"{len(request.ids)} files",
        manager.copy(request.ids, request.target_id),
        background,
    )


@router.post("/{file_id}/encrypt")
async def encrypt_file(
    file_id: str,
    request: PassphraseRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.ENCRYPT,
        _display_name(manager, file_id),
        manager.encrypt_file(file_id, request.passphrase),
        background,
    )


@router.post("/{file_id}/decrypt")
async def decrypt_file(
    file_id: str,
    request: PassphraseRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.DECRYPT,
        _display_name(manager, file_id),
        manager.decrypt_file(file_id, request.passphrase),
        background,
    )


@router.put("/{file_id}/permissions")
async def change_file_permissions(
    file_id: str,
    request: PermissionsRequest,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.CHANGE_PERMISSIONS,
        _display_name(manager, file_id),
        manager.change_permissions(file_id, request.permissions),
        background,
    )


@router.post("/{file_id}/backup")
async def backup_file(
    file_id: str,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.BACKUP,
        _display_name(manager, file_id),
        manager.backup_file(file_id),
        background,
    )


@router.post("/{file_id}/compress")
async def compress_file(
    file_id: str,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.COMPRESS,
        _display_name(manager, file_id),
        manager.compress_file(file_id),
        background,
    )


@router.post("/{file_id}/decompress")
async def decompress_file(
    file_id: str,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.DECOMPRESS,
        _display_name(manager, file_id),
        manager.decompress_file(file_id),
        background,
    )


@router.post("/{file_id}/sort")
async def sort_file_content(
    file_id: str,
    background: bool = False,
    manager: FileManager = Depends(get_file_manager),
):
    return await _execute(
        manager,
        OperationType.SORT_CONTENT,
        _display_name(manager, file_id),
        manager.sort_content(file_id),
        background,
    )


@router.post("/{file_id}/search", response_model=List[str])
async def search_file_content(
    file_id: str,
    request: ContentSearchRequest,
    manager: FileManager = Depends(get_file_manager),
):
    """Lines of the file containing the query, ignoring case"""
    return await manager.search_content(file_id, request.query)
