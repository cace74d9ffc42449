"""
Dependency injection utilities
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from projectpilot.core.database import get_db
from projectpilot.ml.runtime import PredictionRuntime
from projectpilot.services.duration_service import DurationService
from projectpilot.services.repository import WorkspaceRepository
from projectpilot.services.suggestion_service import TaskSuggestionService
from projectpilot.services.workflow_service import WorkflowAnalyzer
from projectpilot.services.workspace_service import WorkspaceService


def get_prediction_runtime(request: Request) -> PredictionRuntime:
    """The runtime resolved at startup; heuristic if startup never ran"""
    runtime = getattr(request.app.state, "prediction_runtime", None)
    return runtime or PredictionRuntime()


def get_repository(db: AsyncSession = Depends(get_db)) -> WorkspaceRepository:
    return WorkspaceRepository(db)


def get_workspace_service(repository: WorkspaceRepository = Depends(get_repository)) -> WorkspaceService:
    return WorkspaceService(repository)


def get_duration_service(
    repository: WorkspaceRepository = Depends(get_repository),
    runtime: PredictionRuntime = Depends(get_prediction_runtime),
) -> DurationService:
    return DurationService(repository, runtime)


def get_suggestion_service(
    repository: WorkspaceRepository = Depends(get_repository),
    runtime: PredictionRuntime = Depends(get_prediction_runtime),
) -> TaskSuggestionService:
    return TaskSuggestionService(repository, runtime)


def get_workflow_analyzer(
    repository: WorkspaceRepository = Depends(get_repository),
    runtime: PredictionRuntime = Depends(get_prediction_runtime),
) -> WorkflowAnalyzer:
    return WorkflowAnalyzer(repository, runtime)
