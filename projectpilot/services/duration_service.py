"""
Task duration estimation
"""
import logging
import math
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, List, NamedTuple

from projectpilot.core.exceptions import ResourceNotFoundError
from projectpilot.core.timeutils import utcnow
from projectpilot.ml.features import extract_task_features
from projectpilot.ml.runtime import METHOD_HEURISTIC, METHOD_ML, PredictionRuntime
from projectpilot.schemas.ai import DurationPrediction
from projectpilot.services.repository import WorkspaceRepository, parse_identifier

logger = logging.getLogger(__name__)

BASE_DAYS_BY_PRIORITY = {'high': 3, 'medium': 5, 'low': 7}
STATUS_MULTIPLIERS = {'in-progress': 0.7, 'review': 0.3}

MIN_BEST_CASE_DAYS = 0.5
BEST_CASE_FACTOR = 0.7
# single task and timeline share one worst-case factor
WORST_CASE_FACTOR = 1.5

HEURISTIC_CONFIDENCE = 0.75
MODEL_CONFIDENCE = 0.8


def round_one_decimal(value: float) -> float:
    """Half-up rounding to one decimal place"""
    return math.floor(value * 10 + 0.5) / 10


class DurationEstimate(NamedTuple):
    days: float
    confidence: float
    method: str


class DurationPredictor(ABC):
    """Predicts the remaining days of work for a single task."""

    @abstractmethod
    def estimate(self, task) -> DurationEstimate:
        pass


class HeuristicDurationPredictor(DurationPredictor):

    def estimate(self, task) -> DurationEstimate:
        base = BASE_DAYS_BY_PRIORITY.get(task.priority, BASE_DAYS_BY_PRIORITY['low'])
        days = base * STATUS_MULTIPLIERS.get(task.status, 1)
        logger.debug(f"Heuristic duration for '{task.title}': priority={task.priority}, status={task.status}, days={days:.2f}")
        return DurationEstimate(days, HEURISTIC_CONFIDENCE, METHOD_HEURISTIC)


class ModelDurationPredictor(DurationPredictor):

    def __init__(self, model, fallback: DurationPredictor):
        self.model = model
        self.fallback = fallback

    def estimate(self, task) -> DurationEstimate:
        try:
            prediction = self.model.predict([extract_task_features(task)])
            days = max(MIN_BEST_CASE_DAYS, float(prediction[0]))
        except Exception as e:
            logger.warning(f"Duration model failed for task {task.id}, using heuristic: {e}")
            return self.fallback.estimate(task)
        return DurationEstimate(days, MODEL_CONFIDENCE, METHOD_ML)


def build_duration_predictor(runtime: PredictionRuntime) -> DurationPredictor:
    heuristic = HeuristicDurationPredictor()
    if runtime.uses_model:
        return ModelDurationPredictor(runtime.duration_model, heuristic)
    return heuristic


class DurationService:
    """Duration estimates for one task or every task of a project"""

    def __init__(
        self,
        repository: WorkspaceRepository,
        runtime: PredictionRuntime,
        clock: Callable = utcnow,
    ):
        self.repository = repository
        self.predictor = build_duration_predictor(runtime)
        self.clock = clock

    def _build_prediction(self, task) -> DurationPrediction:
        estimate = self.predictor.estimate(task)

        predicted_days = round_one_decimal(estimate.days)
        best_case = max(MIN_BEST_CASE_DAYS, round_one_decimal(predicted_days * BEST_CASE_FACTOR))
        worst_case = round_one_decimal(predicted_days * WORST_CASE_FACTOR)

        # whole days only, fractional part is dropped
        completion_date = self.clock().date() + timedelta(days=int(predicted_days))

        return DurationPrediction(
            task_id=task.id,
            task_title=task.title,
            predicted_days=predicted_days,
            best_case=best_case,
            worst_case=worst_case,
            estimated_completion_date=completion_date,
            confidence=estimate.confidence,
            method=estimate.method,
        )

    async def predict_task_duration(self, task_id) -> DurationPrediction:
        """Predict the number of days a task will take to complete"""
        task_uuid = parse_identifier(task_id, "Task")
        logger.info(f"Predicting duration for task ID: {task_uuid}")

        task = await self.repository.get_task(task_uuid)
        if not task:
            logger.warning(f"Task not found with ID: {task_uuid}")
            raise ResourceNotFoundError("Task")

        prediction = self._build_prediction(task)
        logger.info(
            f"Duration prediction for '{task.title}': {prediction.predicted_days} days "
            f"(best case: {prediction.best_case}, worst case: {prediction.worst_case}, method: {prediction.method})"
        )
        return prediction

    async def predict_project_timeline(self, project_id) -> List[DurationPrediction]:
        """Predict durations for all tasks in a project, earliest completion first"""
        project_uuid = parse_identifier(project_id, "Project")
        logger.info(f"Predicting timeline for project ID: {project_uuid}")

        project = await self.repository.get_project(project_uuid)
        if not project:
            logger.warning(f"Project not found with ID: {project_uuid}")
            raise ResourceNotFoundError("Project")

        tasks = await self.repository.list_project_tasks(project_uuid)
        predictions = [self._build_prediction(task) for task in tasks]
        predictions.sort(key=lambda p: p.estimated_completion_date)

        logger.info(f"Generated timeline predictions for {len(predictions)} tasks")
        return predictions
