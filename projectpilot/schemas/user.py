"""
User schemas
"""
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, field_validator

from projectpilot.config import settings
from projectpilot.models.user import USER_ROLES
from projectpilot.schemas.ai import CamelModel


class UserCreate(CamelModel):
    name: str
    email: EmailStr
    password: str
    role: str = "user"

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < settings.password_min_length:
            raise ValueError(f'Password must be at least {settings.password_min_length} characters')
        return v

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return v


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
