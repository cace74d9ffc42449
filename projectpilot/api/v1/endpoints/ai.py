"""
AI prediction endpoints: duration, timeline, task suggestions, workflow analysis
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from projectpilot.config import settings
from projectpilot.core.deps import (
    get_duration_service,
    get_prediction_runtime,
    get_suggestion_service,
    get_workflow_analyzer,
)
from projectpilot.ml.runtime import PredictionRuntime
from projectpilot.schemas.ai import DurationPrediction, PredictionStatus, SuggestedTask, WorkflowAnalysis
from projectpilot.services.duration_service import DurationService
from projectpilot.services.suggestion_service import TaskSuggestionService
from projectpilot.services.workflow_service import WorkflowAnalyzer

router = APIRouter()


@router.get("/status", response_model=PredictionStatus)
async def prediction_status(runtime: PredictionRuntime = Depends(get_prediction_runtime)):
    """Report which prediction path this process is using"""
    return PredictionStatus(method=runtime.method, uses_model=runtime.uses_model, model_dir=runtime.model_dir)


@router.get("/tasks/duration/{task_id}", response_model=DurationPrediction)
async def predict_task_duration(
    task_id: str,
    service: DurationService = Depends(get_duration_service),
):
    """Predict how many days a task will take"""
    return await service.predict_task_duration(task_id)


@router.get("/projects/timeline/{project_id}", response_model=List[DurationPrediction])
async def predict_project_timeline(
    project_id: str,
    service: DurationService = Depends(get_duration_service),
):
    """Predict durations for every task of a project, earliest completion first"""
    return await service.predict_project_timeline(project_id)


@router.get("/tasks/suggest/{project_id}", response_model=List[SuggestedTask])
async def suggest_tasks(
    project_id: str,
    count: int = Query(settings.suggestion_default_count, ge=1, le=settings.suggestion_max_count),
    service: TaskSuggestionService = Depends(get_suggestion_service),
):
    """Suggest new tasks for a project"""
    return await service.suggest_tasks(project_id, count)


@router.get("/projects/optimize/{project_id}", response_model=WorkflowAnalysis)
async def optimize_workflow(
    project_id: str,
    analyzer: WorkflowAnalyzer = Depends(get_workflow_analyzer),
):
    """Analyze a project's workflow for bottlenecks"""
    return await analyzer.analyze(project_id)
