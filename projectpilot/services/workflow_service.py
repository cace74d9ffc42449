"""
Workflow optimization service

Turns a project's tasks and team into five bottleneck scores, then derives
recommendations and insights from those scores and the raw metrics.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional

from projectpilot.core.exceptions import ResourceNotFoundError
from projectpilot.core.timeutils import utcnow
from projectpilot.ml.features import (
    days_between,
    elapsed_progress,
    extract_workflow_features,
    status_counts,
)
from projectpilot.ml.runtime import METHOD_HEURISTIC, METHOD_ML, PredictionRuntime
from projectpilot.schemas.ai import (
    BottleneckAnalysis,
    BottleneckDimension,
    Insight,
    MemberWorkload,
    Recommendation,
    WorkflowAnalysis,
    WorkflowMetrics,
)
from projectpilot.services.repository import WorkspaceRepository, parse_identifier

logger = logging.getLogger(__name__)

LOW_LEVEL_LIMIT = 0.3
MEDIUM_LEVEL_LIMIT = 0.6

IDEAL_IN_PROGRESS_RATIO = 0.3
IDEAL_REVIEW_RATIO = 0.2
DOMINANT_STATUS_RATIO = 0.5
NEUTRAL_DEPENDENCY_SCORE = 0.5

OVERLOADED_TASK_COUNT = 5
UNDERLOADED_TASK_COUNT = 3
MAX_PARALLEL_TASKS = 10

SCHEDULE_TOLERANCE = 0.1
MIN_RECOMMENDATIONS = 2

DIMENSION_LABELS = {
    "resourceBottleneck": "resource allocation",
    "taskDistribution": "task distribution",
    "workflowEfficiency": "workflow efficiency",
    "taskDependency": "task dependencies",
    "priorityAlignment": "priority alignment",
}


def score_level(score: float) -> str:
    if score < LOW_LEVEL_LIMIT:
        return "low"
    if score < MEDIUM_LEVEL_LIMIT:
        return "medium"
    return "high"


def clamp_score(score: float) -> float:
    return round(max(0.0, min(1.0, score)), 4)


def percent(ratio: float) -> int:
    return round(ratio * 100)


def dimension(score: float, description: str) -> BottleneckDimension:
    score = clamp_score(score)
    return BottleneckDimension(score=score, level=score_level(score), description=description)


@dataclass
class MemberLoad:
    user_id: object
    name: str
    assigned_tasks: int
    tasks_by_status: Dict[str, int]


@dataclass
class WorkflowSnapshot:
    """Metrics gathered for one project at one point in time"""

    project: object
    tasks: list
    now: object
    team: List[MemberLoad] = field(default_factory=list)

    def __post_init__(self):
        self.tasks_by_status = status_counts(self.tasks)
        self.total_tasks = len(self.tasks)

    def ratio(self, status: str) -> float:
        if not self.total_tasks:
            return 0.0
        return self.tasks_by_status.get(status, 0) / self.total_tasks

    @property
    def progress(self) -> float:
        return self.ratio("completed")

    @property
    def days_remaining(self) -> int:
        return math.ceil(days_between(self.now, self.project.end_date))

    @property
    def high_priority_tasks(self) -> list:
        return [task for task in self.tasks if task.priority == "high"]

    def to_metrics(self) -> WorkflowMetrics:
        return WorkflowMetrics(
            tasks_by_status=dict(self.tasks_by_status),
            total_tasks=self.total_tasks,
            project_progress=round(self.progress, 4),
            days_remaining=self.days_remaining,
            team_size=len(self.team),
            team_workload=[
                MemberWorkload(
                    user_id=member.user_id,
                    name=member.name,
                    assigned_tasks=member.assigned_tasks,
                    tasks_by_status=member.tasks_by_status,
                )
                for member in self.team
            ],
        )


class ScoredAnalysis(NamedTuple):
    analysis: BottleneckAnalysis
    method: str


class HeuristicBottleneckScorer:
    """Rule-based scores for the five bottleneck dimensions"""

    method = METHOD_HEURISTIC

    def resource_bottleneck(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        if not snapshot.team:
            return dimension(0.0, "No team members found for this project.")

        most = max(snapshot.team, key=lambda m: m.assigned_tasks)
        least = min(snapshot.team, key=lambda m: m.assigned_tasks)
        if most.assigned_tasks == least.assigned_tasks:
            return dimension(
                0.0,
                f"Workload is evenly distributed: every team member has {most.assigned_tasks} assigned tasks.",
            )

        balance = 1 - (most.assigned_tasks - least.assigned_tasks) / most.assigned_tasks
        score = 1 - balance
        return dimension(
            score,
            f"{most.name} has {most.assigned_tasks} tasks while {least.name} has {least.assigned_tasks}; "
            f"workload differs by {percent(score)}% of the heaviest load.",
        )

    def task_distribution(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        if not snapshot.total_tasks:
            return dimension(0.0, "No tasks to analyze yet.")

        dominant = max(("todo", "in-progress", "review"), key=snapshot.ratio)
        max_ratio = snapshot.ratio(dominant)
        score = 0.5 + max_ratio * 0.5 if max_ratio > DOMINANT_STATUS_RATIO else max_ratio

        description = (
            f"{percent(max_ratio)}% of tasks ({snapshot.tasks_by_status[dominant]} of "
            f"{snapshot.total_tasks}) are in '{dominant}'."
        )
        if max_ratio > DOMINANT_STATUS_RATIO:
            description += f" The '{dominant}' status is overrepresented."
        return dimension(score, description)

    def workflow_efficiency(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        in_progress = snapshot.ratio("in-progress")
        review = snapshot.ratio("review")
        score = abs(in_progress - IDEAL_IN_PROGRESS_RATIO) + abs(review - IDEAL_REVIEW_RATIO)

        description = (
            f"{percent(in_progress)}% of tasks are in progress and {percent(review)}% in review, "
            f"against an ideal of {percent(IDEAL_IN_PROGRESS_RATIO)}% and {percent(IDEAL_REVIEW_RATIO)}%."
        )
        if in_progress > IDEAL_IN_PROGRESS_RATIO:
            description += " Too many tasks in progress at once points to context switching."
        return dimension(score, description)

    def task_dependency(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        return dimension(
            NEUTRAL_DEPENDENCY_SCORE,
            "Task dependencies are not tracked; dependency risk is assumed to be moderate.",
        )

    def priority_alignment(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        high_tasks = snapshot.high_priority_tasks
        if not high_tasks:
            return dimension(0.0, "No high-priority tasks in this project.")

        in_progress = sum(1 for task in high_tasks if task.status == "in-progress")
        not_started = sum(1 for task in high_tasks if task.status == "todo")
        score = 1 - in_progress / len(high_tasks)
        return dimension(
            score,
            f"{in_progress} of {len(high_tasks)} high-priority tasks are in progress; "
            f"{not_started} have not been started.",
        )

    def score(self, snapshot: WorkflowSnapshot) -> ScoredAnalysis:
        analysis = BottleneckAnalysis(
            resource_bottleneck=self.resource_bottleneck(snapshot),
            task_distribution=self.task_distribution(snapshot),
            workflow_efficiency=self.workflow_efficiency(snapshot),
            task_dependency=self.task_dependency(snapshot),
            priority_alignment=self.priority_alignment(snapshot),
        )
        return ScoredAnalysis(analysis, self.method)


class ModelBottleneckScorer(HeuristicBottleneckScorer):
    """Learned dependency score on top of the rule-based dimensions"""

    method = METHOD_ML

    def __init__(self, model):
        self.model = model

    def task_dependency(self, snapshot: WorkflowSnapshot) -> BottleneckDimension:
        features = extract_workflow_features(snapshot.tasks_by_status, snapshot.total_tasks, len(snapshot.team))
        score = clamp_score(float(self.model.predict([features])[0]))
        return dimension(score, f"Estimated dependency pressure is {percent(score)}% for the current status mix.")

    def score(self, snapshot: WorkflowSnapshot) -> ScoredAnalysis:
        try:
            return super().score(snapshot)
        except Exception as e:
            logger.warning(f"Dependency model failed for project {snapshot.project.id}, using heuristic: {e}")
            return HeuristicBottleneckScorer().score(snapshot)


def build_bottleneck_scorer(runtime: PredictionRuntime) -> HeuristicBottleneckScorer:
    if runtime.uses_model:
        return ModelBottleneckScorer(runtime.dependency_model)
    return HeuristicBottleneckScorer()


def _member_summary(member: MemberLoad) -> Dict[str, object]:
    return {"userId": str(member.user_id), "name": member.name, "taskCount": member.assigned_tasks}


def generate_recommendations(snapshot: WorkflowSnapshot, analysis: BottleneckAnalysis) -> List[Recommendation]:
    recommendations = []

    resource = analysis.resource_bottleneck
    if resource.level == "high":
        overloaded = [m for m in snapshot.team if m.assigned_tasks > OVERLOADED_TASK_COUNT]
        underloaded = [m for m in snapshot.team if m.assigned_tasks < UNDERLOADED_TASK_COUNT]
        if overloaded and underloaded:
            source = max(overloaded, key=lambda m: m.assigned_tasks)
            target = min(underloaded, key=lambda m: m.assigned_tasks)
            recommendations.append(Recommendation(
                type="task_redistribution",
                priority="high",
                description=(
                    f"Move tasks from {source.name} ({source.assigned_tasks} tasks) "
                    f"to {target.name} ({target.assigned_tasks} tasks)."
                ),
                action="redistribute_tasks",
                details={
                    "from": _member_summary(source),
                    "to": _member_summary(target),
                    "overloadedMembers": [_member_summary(m) for m in overloaded],
                    "underloadedMembers": [_member_summary(m) for m in underloaded],
                },
            ))
        elif overloaded:
            recommendations.append(Recommendation(
                type="add_resources",
                priority="high",
                description=(
                    f"{len(overloaded)} team member(s) carry more than {OVERLOADED_TASK_COUNT} tasks "
                    f"and nobody has spare capacity. Consider adding team members."
                ),
                action="add_team_members",
                details={"overloadedMembers": [_member_summary(m) for m in overloaded]},
            ))
    elif resource.level == "medium":
        recommendations.append(Recommendation(
            type="review_assignments",
            priority="medium",
            description="Workload is somewhat uneven. Review task assignments across the team.",
            action="review_assignments",
        ))

    if analysis.task_distribution.level == "high":
        dominant = max(("todo", "in-progress", "review"), key=snapshot.ratio)
        count = snapshot.tasks_by_status[dominant]
        if dominant == "todo":
            recommendations.append(Recommendation(
                type="start_tasks",
                priority="medium",
                description=f"{count} tasks have not been started. Begin work on the highest-priority ones.",
                action="start_todo_tasks",
                details={"status": dominant, "count": count},
            ))
        elif dominant == "in-progress":
            recommendations.append(Recommendation(
                type="finish_in_progress",
                priority="medium",
                description=f"{count} tasks are in progress. Finish them before starting new work.",
                action="complete_in_progress",
                details={"status": dominant, "count": count},
            ))
        else:
            recommendations.append(Recommendation(
                type="review_capacity",
                priority="medium",
                description=f"{count} tasks are waiting for review. Dedicate time to reviews.",
                action="schedule_reviews",
                details={"status": dominant, "count": count},
            ))

    if analysis.workflow_efficiency.level in ("medium", "high"):
        recommendations.append(Recommendation(
            type="daily_standups",
            priority="medium",
            description="Hold short daily standups to surface blocked and stalled work.",
            action="schedule_standups",
        ))
        in_progress_ratio = snapshot.ratio("in-progress")
        if in_progress_ratio > IDEAL_IN_PROGRESS_RATIO:
            recommendations.append(Recommendation(
                type="limit_wip",
                priority="medium",
                description=(
                    f"{percent(in_progress_ratio)}% of tasks are in progress. "
                    f"Set a work-in-progress limit to reduce context switching."
                ),
                action="set_wip_limit",
                details={"inProgressRatio": round(in_progress_ratio, 4)},
            ))

    if analysis.priority_alignment.level in ("medium", "high"):
        high_todo = sum(1 for task in snapshot.high_priority_tasks if task.status == "todo")
        if high_todo:
            recommendations.append(Recommendation(
                type="prioritization",
                priority="medium",
                description=f"Focus on the {high_todo} high-priority tasks that have not been started.",
                action="focus_high_priority",
                details={"highPriorityTodo": high_todo},
            ))

    if len(recommendations) < MIN_RECOMMENDATIONS:
        recommendations.append(Recommendation(
            type="retrospective",
            priority="low",
            description="Run a team retrospective to look for further process improvements.",
            action="schedule_retrospective",
        ))

    return recommendations


def generate_insights(snapshot: WorkflowSnapshot, analysis: BottleneckAnalysis) -> List[Insight]:
    insights = []
    project = snapshot.project
    progress = snapshot.progress
    expected = elapsed_progress(project.start_date, project.end_date, snapshot.now)

    if progress < expected - SCHEDULE_TOLERANCE:
        insights.append(Insight(
            type="risk",
            description=f"Project is behind schedule: {percent(progress)}% complete against an expected {percent(expected)}%.",
        ))
    elif progress > expected + SCHEDULE_TOLERANCE:
        insights.append(Insight(
            type="positive",
            description=f"Project is ahead of schedule: {percent(progress)}% complete against an expected {percent(expected)}%.",
        ))

    in_progress = snapshot.tasks_by_status["in-progress"]
    if in_progress > MAX_PARALLEL_TASKS:
        insights.append(Insight(
            type="risk",
            description=f"{in_progress} tasks are in progress at the same time.",
        ))

    high_dimensions = [
        DIMENSION_LABELS[key] for key, value in analysis.dimensions().items() if value.level == "high"
    ]
    if len(high_dimensions) >= 2:
        insights.append(Insight(
            type="risk",
            description=f"{len(high_dimensions)} areas show severe bottlenecks: {', '.join(high_dimensions)}.",
        ))
    elif not high_dimensions:
        insights.append(Insight(type="positive", description="No severe bottlenecks detected in the workflow."))

    days_remaining = snapshot.days_remaining
    if days_remaining < 7 and progress < 0.8:
        if days_remaining < 0:
            description = f"Deadline passed {abs(days_remaining)} days ago with {percent(progress)}% of tasks complete."
        else:
            description = f"Only {days_remaining} days remain with {percent(progress)}% of tasks complete."
        insights.append(Insight(type="urgent", description=description))
    elif days_remaining < 14 and progress < 0.6:
        insights.append(Insight(
            type="risk",
            description=f"{days_remaining} days remain with {percent(progress)}% of tasks complete.",
        ))

    return insights


class WorkflowAnalyzer:
    """Bottleneck analysis for a single project"""

    def __init__(
        self,
        repository: WorkspaceRepository,
        runtime: PredictionRuntime,
        clock: Callable = utcnow,
    ):
        self.repository = repository
        self.scorer = build_bottleneck_scorer(runtime)
        self.clock = clock

    async def _build_snapshot(self, project, now) -> WorkflowSnapshot:
        tasks = await self.repository.list_project_tasks(project.id)
        users = {user.id: user for user in await self.repository.list_users(project.team_ids)}

        snapshot = WorkflowSnapshot(project=project, tasks=tasks, now=now)
        for user_id in project.team_ids:
            user = users.get(user_id)
            if user is None:
                continue
            assigned = [task for task in tasks if task.assigned_to == user_id]
            snapshot.team.append(MemberLoad(
                user_id=user_id,
                name=user.display_name,
                assigned_tasks=len(assigned),
                tasks_by_status=status_counts(assigned),
            ))
        return snapshot

    async def analyze(self, project_id, now: Optional[object] = None) -> WorkflowAnalysis:
        """Analyze a project's workflow and recommend improvements"""
        project_uuid = parse_identifier(project_id, "Project")
        logger.info(f"Analyzing workflow for project ID: {project_uuid}")

        project = await self.repository.get_project(project_uuid)
        if not project:
            logger.warning(f"Project not found with ID: {project_uuid}")
            raise ResourceNotFoundError("Project")

        now = now or self.clock()
        snapshot = await self._build_snapshot(project, now)
        analysis, method = self.scorer.score(snapshot)

        recommendations = generate_recommendations(snapshot, analysis)
        insights = generate_insights(snapshot, analysis)

        logger.info(
            f"Workflow analysis for '{project.name}': {snapshot.total_tasks} tasks, "
            f"{len(recommendations)} recommendations, {len(insights)} insights (method: {method})"
        )
        return WorkflowAnalysis(
            project_id=project.id,
            project_name=project.name,
            analysis_date=now,
            method=method,
            metrics=snapshot.to_metrics(),
            bottleneck_analysis=analysis,
            recommendations=recommendations,
            insights=insights,
        )
