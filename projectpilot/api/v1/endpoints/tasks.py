"""
Task endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from projectpilot.core.deps import get_workspace_service
from projectpilot.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from projectpilot.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Create a task in an existing project"""
    task = await service.create_task(task_data)
    return TaskResponse.from_task(task)


@router.get("", response_model=List[TaskResponse])
async def get_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    service: WorkspaceService = Depends(get_workspace_service),
):
    tasks = await service.list_tasks((page - 1) * limit, limit)
    return [TaskResponse.from_task(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    task = await service.get_task(task_id)
    return TaskResponse.from_task(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    task = await service.update_task(task_id, task_data)
    return TaskResponse.from_task(task)
