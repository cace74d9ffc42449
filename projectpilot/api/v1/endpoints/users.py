"""
User endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from projectpilot.core.deps import get_workspace_service
from projectpilot.schemas.user import UserCreate, UserResponse
from projectpilot.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    user = await service.create_user(user_data)
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse])
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    service: WorkspaceService = Depends(get_workspace_service),
):
    users = await service.list_users((page - 1) * limit, limit)
    return [UserResponse.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    user = await service.get_user(user_id)
    return UserResponse.model_validate(user)
