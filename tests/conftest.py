"""
Shared fixtures: an in-memory database per test, record factories and an API client
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("AI_MODEL_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from projectpilot.core.database import Base, get_db  # noqa: E402
from projectpilot.core.rate_limiting import rate_limiter  # noqa: E402
from projectpilot.main import app  # noqa: E402
from projectpilot.ml.runtime import PredictionRuntime  # noqa: E402
from projectpilot.models.project import Project  # noqa: E402
from projectpilot.models.task import Task  # noqa: E402
from projectpilot.models.user import User  # noqa: E402
from projectpilot.services.repository import WorkspaceRepository  # noqa: E402

from tests.helpers import NOW  # noqa: E402


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session):
    return WorkspaceRepository(db_session)


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def factory(name="Member", **kwargs):
        counter["n"] += 1
        user = User(
            name=name,
            email=kwargs.pop("email", f"user{counter['n']}@example.com"),
            password_hash="hashed",
            **kwargs,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return factory


@pytest.fixture
def make_project(db_session):
    async def factory(owner, members=(), name="Website Redesign", description="Team project",
                      start_offset_days=-10, duration_days=40, status="in-progress"):
        start = NOW + timedelta(days=start_offset_days)
        project = Project(
            name=name,
            description=description,
            start_date=start,
            end_date=start + timedelta(days=duration_days),
            status=status,
            owner_id=owner.id,
            members=list(members),
        )
        db_session.add(project)
        await db_session.flush()
        return project

    return factory


@pytest.fixture
def make_task(db_session):
    async def factory(project, title="Task", status="todo", priority="medium", assigned_to=None, **kwargs):
        task = Task(
            title=title,
            description=kwargs.pop("description", ""),
            status=status,
            priority=priority,
            project_id=project.id,
            assigned_to=assigned_to.id if assigned_to is not None else None,
            created_by=project.owner_id,
            **kwargs,
        )
        db_session.add(task)
        await db_session.flush()
        return task

    return factory


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.prediction_runtime = PredictionRuntime()
    rate_limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    rate_limiter.reset()
