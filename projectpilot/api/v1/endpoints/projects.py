"""
Project management endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from projectpilot.core.deps import get_workspace_service
from projectpilot.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from projectpilot.schemas.task import TaskResponse
from projectpilot.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Create a new project"""
    project = await service.create_project(project_data)
    return ProjectResponse.from_project(project)


@router.get("", response_model=List[ProjectResponse])
async def get_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: WorkspaceService = Depends(get_workspace_service),
):
    projects = await service.list_projects((page - 1) * limit, limit)
    return [ProjectResponse.from_project(project) for project in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    project = await service.get_project(project_id)
    return ProjectResponse.from_project(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    project = await service.update_project(project_id, project_data)
    return ProjectResponse.from_project(project)


@router.get("/{project_id}/tasks", response_model=List[TaskResponse])
async def get_project_tasks(
    project_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """List every task of a project"""
    tasks = await service.list_project_tasks(project_id)
    return [TaskResponse.from_task(task) for task in tasks]
