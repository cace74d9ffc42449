"""
User, project and task management
"""
import logging
from typing import Iterable, List

from projectpilot.core.exceptions import DuplicateResourceError, ResourceNotFoundError, ValidationError
from projectpilot.core.security import hash_password
from projectpilot.core.timeutils import ensure_utc
from projectpilot.models.project import Project
from projectpilot.models.task import Task
from projectpilot.models.user import User
from projectpilot.schemas.project import ProjectCreate, ProjectUpdate
from projectpilot.schemas.task import TaskCreate, TaskUpdate
from projectpilot.schemas.user import UserCreate
from projectpilot.services.repository import WorkspaceRepository, parse_identifier

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    # Users

    async def create_user(self, data: UserCreate) -> User:
        email = data.email.lower()
        if await self.repository.get_user_by_email(email):
            raise DuplicateResourceError("User", details={"email": email})

        user = User(
            name=data.name,
            email=email,
            password_hash=hash_password(data.password),
            role=data.role,
        )
        await self.repository.add_user(user)
        logger.info(f"User created: {user.id}")
        return user

    async def get_user(self, user_id) -> User:
        user = await self.repository.get_user(parse_identifier(user_id, "User"))
        if not user:
            raise ResourceNotFoundError("User")
        return user

    async def list_users(self, offset: int = 0, limit: int = 50) -> List[User]:
        return await self.repository.list_all_users(offset, limit)

    async def _resolve_members(self, member_ids: Iterable) -> List[User]:
        ids = list(dict.fromkeys(member_ids))
        users = await self.repository.list_users(ids)
        found = {user.id for user in users}
        missing = [str(member_id) for member_id in ids if member_id not in found]
        if missing:
            raise ResourceNotFoundError("User", details={"missing": missing})
        return users

    # Projects

    async def create_project(self, data: ProjectCreate) -> Project:
        owner = await self.repository.get_user(data.owner)
        if not owner:
            raise ResourceNotFoundError("User", details={"owner": str(data.owner)})

        project = Project(
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status,
            owner_id=owner.id,
            members=await self._resolve_members(data.members),
        )
        await self.repository.add_project(project)
        logger.info(f"Project created: {project.id} ({project.name})")
        return project

    async def get_project(self, project_id) -> Project:
        project = await self.repository.get_project(parse_identifier(project_id, "Project"))
        if not project:
            raise ResourceNotFoundError("Project")
        return project

    async def list_projects(self, offset: int = 0, limit: int = 20) -> List[Project]:
        return await self.repository.list_projects(offset, limit)

    async def update_project(self, project_id, data: ProjectUpdate) -> Project:
        project = await self.get_project(project_id)
        changes = data.model_dump(exclude_unset=True, exclude={"members"})

        start = ensure_utc(changes.get("start_date", project.start_date))
        end = ensure_utc(changes.get("end_date", project.end_date))
        if end <= start:
            raise ValidationError("End date must be after start date")

        for key, value in changes.items():
            setattr(project, key, value)
        if data.members is not None:
            project.members = await self._resolve_members(data.members)

        await self.repository.save()
        logger.info(f"Project updated: {project.id}")
        return await self.get_project(project.id)

    async def list_project_tasks(self, project_id) -> List[Task]:
        project = await self.get_project(project_id)
        return await self.repository.list_project_tasks(project.id)

    # Tasks

    async def create_task(self, data: TaskCreate) -> Task:
        project = await self.repository.get_project(data.project)
        if not project:
            raise ResourceNotFoundError("Project")

        for user_id in (data.assigned_to, data.created_by):
            if user_id is not None and not await self.repository.get_user(user_id):
                raise ResourceNotFoundError("User", details={"userId": str(user_id)})

        task = Task(
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            due_date=data.due_date,
            project_id=project.id,
            assigned_to=data.assigned_to,
            created_by=data.created_by or project.owner_id,
        )
        await self.repository.add_task(task)
        logger.info(f"Task created: {task.id} in project {project.id}")
        return task

    async def get_task(self, task_id) -> Task:
        task = await self.repository.get_task(parse_identifier(task_id, "Task"))
        if not task:
            raise ResourceNotFoundError("Task")
        return task

    async def list_tasks(self, offset: int = 0, limit: int = 50) -> List[Task]:
        return await self.repository.list_tasks(offset, limit)

    async def update_task(self, task_id, data: TaskUpdate) -> Task:
        task = await self.get_task(task_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("assigned_to") is not None and not await self.repository.get_user(changes["assigned_to"]):
            raise ResourceNotFoundError("User", details={"userId": str(changes["assigned_to"])})

        for key, value in changes.items():
            setattr(task, key, value)

        await self.repository.save()
        logger.info(f"Task updated: {task.id}")
        return task
