"""
Response schemas for the AI endpoints
"""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

Method = Literal["ml", "heuristic"]
Level = Literal["low", "medium", "high"]


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either spelling on input"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DurationPrediction(CamelModel):
    task_id: UUID
    task_title: str
    predicted_days: float
    best_case: float
    worst_case: float
    estimated_completion_date: date
    confidence: float
    method: Method


class SuggestedTask(CamelModel):
    title: str
    priority: str
    category: str
    status: str = "todo"
    description: str
    due_date: datetime
    project: UUID
    assigned_to: UUID
    created_by: UUID
    confidence: str
    method: Method


class BottleneckDimension(CamelModel):
    score: float = Field(ge=0, le=1)
    level: Level
    description: str


class BottleneckAnalysis(CamelModel):
    resource_bottleneck: BottleneckDimension
    task_distribution: BottleneckDimension
    workflow_efficiency: BottleneckDimension
    task_dependency: BottleneckDimension
    priority_alignment: BottleneckDimension

    def dimensions(self) -> Dict[str, BottleneckDimension]:
        return {
            "resourceBottleneck": self.resource_bottleneck,
            "taskDistribution": self.task_distribution,
            "workflowEfficiency": self.workflow_efficiency,
            "taskDependency": self.task_dependency,
            "priorityAlignment": self.priority_alignment,
        }


class Recommendation(CamelModel):
    type: str
    priority: Level
    description: str
    action: str
    details: Optional[Dict[str, Any]] = None


class Insight(CamelModel):
    type: Literal["risk", "positive", "urgent"]
    description: str


class MemberWorkload(CamelModel):
    user_id: UUID
    name: str
    assigned_tasks: int
    tasks_by_status: Dict[str, int]


class WorkflowMetrics(CamelModel):
    tasks_by_status: Dict[str, int]
    total_tasks: int
    project_progress: float
    days_remaining: int
    team_size: int
    team_workload: List[MemberWorkload]


class WorkflowAnalysis(CamelModel):
    project_id: UUID
    project_name: str
    analysis_date: datetime
    method: Method
    metrics: WorkflowMetrics
    bottleneck_analysis: BottleneckAnalysis
    recommendations: List[Recommendation]
    insights: List[Insight]


class PredictionStatus(CamelModel):
    method: Method
    uses_model: bool
    model_dir: Optional[str] = None
