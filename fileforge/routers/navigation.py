from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..dependencies import get_file_manager
from ..files.manager import FileManager
from ..files.types import NavigationState

router = APIRouter(
    prefix="/navigation",
    tags=["navigation"],
)


class NavigateRequest(BaseModel):
    directory_id: Optional[str]


class SearchTermRequest(BaseModel):
    term: str


def _state(manager: FileManager) -> NavigationState:
    navigator = manager.navigator
    return NavigationState(
        current_directory=navigator.current_directory,
        selection=navigator.selection,
        search_term=navigator.search_term,
        is_loading=manager.is_loading,
    )


@router.get("", response_model=NavigationState)
async def get_navigation_state(manager: FileManager = Depends(get_file_manager)):
    return _state(manager)


@router.post("/directory", response_model=NavigationState)
async def navigate_to_directory(
    request: NavigateRequest, manager: FileManager = Depends(get_file_manager)
):
    """Change the listed folder; this also clears the selection"""
    manager.navigator.navigate(request.directory_id)
    return _state(manager)


@router.post("/selection/{file_id}", response_model=NavigationState)
async def toggle_selection(
    file_id: str, manager: FileManager = Depends(get_file_manager)
):
    manager.navigator.toggle_select(file_id)
    return _state(manager)


@router.post("/selection", response_model=NavigationState)
async def select_all(manager: FileManager = Depends(get_file_manager)):
    """Select every file in the current directory"""
    manager.navigator.select_all()
    return _state(manager)


@router.delete("/selection", response_model=NavigationState)
async def clear_selection(manager: FileManager = Depends(get_file_manager)):
    manager.navigator.clear_selection()
    return _state(manager)


@router.put("/search", response_model=NavigationState)
async def set_search_term(
    request: SearchTermRequest, manager: FileManager = Depends(get_file_manager)
):
    """Set the tree-wide search term; an empty term shows the current directory again"""
    manager.navigator.set_search_term(request.term)
    return _state(manager)
