"""
Task schemas
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import field_validator

from projectpilot.models.task import TASK_PRIORITIES, TASK_STATUSES
from projectpilot.schemas.ai import CamelModel


def _validate_choice(v, choices, label):
    if v is not None and v not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return v


class TaskCreate(CamelModel):
    title: str
    description: str
    status: str = "todo"
    priority: str = "medium"
    due_date: datetime
    project: UUID
    assigned_to: Optional[UUID] = None
    created_by: Optional[UUID] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Task title is required')
        if len(v.strip()) > 100:
            raise ValueError('Task title must be less than 100 characters')
        return v.strip()

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _validate_choice(v, TASK_STATUSES, 'Status')

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, v):
        return _validate_choice(v, TASK_PRIORITIES, 'Priority')


class TaskUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[UUID] = None

    @field_validator('title', 'status', 'priority')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Task title cannot be empty')
        return v.strip()

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _validate_choice(v, TASK_STATUSES, 'Status')

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, v):
        return _validate_choice(v, TASK_PRIORITIES, 'Priority')


class TaskResponse(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    project: UUID
    assigned_to: Optional[UUID] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            project=task.project_id,
            assigned_to=task.assigned_to,
            created_by=task.created_by,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
