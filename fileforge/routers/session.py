from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..auth import InvalidCredentials, User, authenticate
from ..config import settings
from ..dependencies import get_file_manager
from ..files.manager import FileManager
from ..files.types import SessionRole, UserRole

router = APIRouter(
    prefix="/session",
    tags=["session"],
)


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login", response_model=User)
async def login(request: LoginRequest, manager: FileManager = Depends(get_file_manager)):
    try:
        user = authenticate(request.username, request.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    manager.gate.set_role(user.role)
    return user


@router.post("/logout", response_model=SessionRole)
async def logout(manager: FileManager = Depends(get_file_manager)):
    """Drop back to the configured default role"""
    manager.gate.set_role(settings.default_role)
    return SessionRole(role_id=manager.gate.role_id)


@router.get("/role", response_model=SessionRole)
async def get_role(manager: FileManager = Depends(get_file_manager)):
    return SessionRole(role_id=manager.gate.role_id)


@router.put("/role", response_model=SessionRole)
async def set_role(
    request: SessionRole, manager: FileManager = Depends(get_file_manager)
):
    """Act as another role from the role table"""
    if request.role_id not in {role.id for role in manager.gate.roles}:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Role '{request.role_id}' not found",
        )
    manager.gate.set_role(request.role_id)
    return SessionRole(role_id=manager.gate.role_id)


@router.get("/roles", response_model=List[UserRole])
async def list_roles(manager: FileManager = Depends(get_file_manager)):
    return manager.gate.roles
