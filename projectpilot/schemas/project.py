"""
Project schemas
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import field_validator, model_validator

from projectpilot.core.timeutils import ensure_utc
from projectpilot.models.project import PROJECT_STATUSES
from projectpilot.schemas.ai import CamelModel


def _validate_status(v):
    if v is not None and v not in PROJECT_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(PROJECT_STATUSES)}")
    return v


class ProjectCreate(CamelModel):
    name: str
    description: str
    start_date: datetime
    end_date: datetime
    status: str = "planning"
    owner: UUID
    members: List[UUID] = []

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Project name is required')
        if len(v.strip()) > 100:
            raise ValueError('Project name must be less than 100 characters')
        return v.strip()

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if not v.strip():
            raise ValueError('Project description is required')
        return v.strip()

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @model_validator(mode='after')
    def validate_dates(self):
        if ensure_utc(self.end_date) <= ensure_utc(self.start_date):
            raise ValueError('End date must be after start date')
        return self


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    members: Optional[List[UUID]] = None

    @field_validator('name', 'start_date', 'end_date', 'status')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Project name cannot be empty')
        return v.strip()

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class ProjectResponse(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: str
    owner: UUID
    members: List[UUID]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_project(cls, project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            start_date=project.start_date,
            end_date=project.end_date,
            status=project.status,
            owner=project.owner_id,
            members=project.member_ids,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )
