"""
Storage access for projects, tasks and users
"""
import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from projectpilot.core.exceptions import InternalServiceError, InvalidIdentifierError
from projectpilot.models.project import Project
from projectpilot.models.task import Task
from projectpilot.models.user import User

logger = logging.getLogger(__name__)


def parse_identifier(value, resource: str = "Resource") -> uuid.UUID:
    """Validate an identifier before any lookup is issued."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        logger.warning(f"Invalid {resource.lower()} ID format: {value}")
        raise InvalidIdentifierError(resource, str(value))


class WorkspaceRepository:
    """Find-by-id and find-by-filter lookups over the workspace tables"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalars(self, stmt) -> list:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Database query failed: {e}", exc_info=True)
            raise InternalServiceError("Storage unavailable")
        return list(result.scalars().all())

    async def _first(self, stmt):
        rows = await self._scalars(stmt)
        return rows[0] if rows else None

    async def _flush(self):
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database write failed: {e}", exc_info=True)
            raise InternalServiceError("Storage unavailable")

    # Projects

    async def get_project(self, project_id: uuid.UUID) -> Optional[Project]:
        stmt = (
            select(Project)
            .options(selectinload(Project.members))
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        return await self._first(stmt)

    async def list_projects(self, offset: int = 0, limit: int = 20) -> List[Project]:
        stmt = (
            select(Project)
            .options(selectinload(Project.members))
            .order_by(Project.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def add_project(self, project: Project) -> Project:
        self.db.add(project)
        await self._flush()
        return project

    # Tasks

    async def get_task(self, task_id: uuid.UUID) -> Optional[Task]:
        stmt = (
            select(Task)
            .options(selectinload(Task.assignee))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return await self._first(stmt)

    async def list_project_tasks(self, project_id: uuid.UUID) -> List[Task]:
        stmt = select(Task).where(Task.project_id == project_id).order_by(Task.created_at)
        return await self._scalars(stmt)

    async def list_tasks(self, offset: int = 0, limit: int = 50) -> List[Task]:
        stmt = select(Task).order_by(Task.created_at.desc()).offset(offset).limit(limit)
        return await self._scalars(stmt)

    async def add_task(self, task: Task) -> Task:
        self.db.add(task)
        await self._flush()
        return task

    async def save(self):
        await self._flush()

    # Users

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._first(select(User).where(User.id == user_id))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._first(select(User).where(User.email == email.lower()))

    async def list_users(self, user_ids: Iterable[uuid.UUID]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        return await self._scalars(select(User).where(User.id.in_(ids)))

    async def list_all_users(self, offset: int = 0, limit: int = 50) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc()).offset(offset).limit(limit)
        return await self._scalars(stmt)

    async def add_user(self, user: User) -> User:
        self.db.add(user)
        await self._flush()
        return user
