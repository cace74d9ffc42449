"""
Feature extraction shared by the duration, suggestion and workflow services.

Every model consumes plain lists of floats so the heuristic path never needs
numpy or scikit-learn to be importable.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from projectpilot.core.timeutils import ensure_utc, utcnow

SECONDS_PER_DAY = 60 * 60 * 24

PROJECT_STATUS_MAP = {
    'planning': 0.0,
    'in-progress': 0.5,
    'completed': 1.0,
    'on-hold': 0.25,
}

TASK_STATUS_MAP = {
    'todo': 0.0,
    'in-progress': 0.5,
    'review': 0.8,
    'completed': 1.0,
}

PRIORITY_LEVELS = ('high', 'medium', 'low')

WORKFLOW_STATUSES = ('todo', 'in-progress', 'review', 'completed')


def days_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / SECONDS_PER_DAY


def normalize_value(value: float, minimum: float, maximum: float) -> float:
    """Scale a value to 0-1 relative to the given range (not clamped)."""
    return (value - minimum) / (maximum - minimum)


def elapsed_progress(start: datetime, end: datetime, now: Optional[datetime] = None) -> float:
    """Share of the project's date span already elapsed, clamped to [0, 1]."""
    now = now or utcnow()
    total_days = days_between(start, end)
    if total_days <= 0:
        return 1.0
    return max(0.0, min(1.0, days_between(start, now) / total_days))


def extract_task_features(task) -> List[float]:
    """[high, medium, low, status, title length, description length]"""
    priority = task.priority if task.priority in PRIORITY_LEVELS else 'low'
    one_hot = [1.0 if priority == level else 0.0 for level in PRIORITY_LEVELS]
    return one_hot + [
        TASK_STATUS_MAP.get(task.status, 0.0),
        min(len(task.title or ''), 100) / 100,
        min(len(task.description or ''), 1000) / 1000,
    ]


def extract_project_features(project, existing_task_count: int,
                             now: Optional[datetime] = None) -> List[float]:
    """Status, elapsed-time progress, days remaining, team size, task count"""
    now = now or utcnow()
    days_remaining = max(0.0, days_between(now, project.end_date))
    team_size = len(project.team_ids)
    return [
        PROJECT_STATUS_MAP.get(project.status, 0.0),
        elapsed_progress(project.start_date, project.end_date, now),
        normalize_value(days_remaining, 0, 100),
        normalize_value(team_size, 1, 10),
        normalize_value(existing_task_count, 0, 30),
    ]


def status_counts(tasks: Iterable) -> Dict[str, int]:
    counts = {status: 0 for status in WORKFLOW_STATUSES}
    for task in tasks:
        if task.status in counts:
            counts[task.status] += 1
    return counts


def extract_workflow_features(tasks_by_status: Dict[str, int], total_tasks: int,
                              team_size: int) -> List[float]:
    """Status ratios followed by normalized task count and team size"""
    ratios = [
        tasks_by_status.get(status, 0) / total_tasks if total_tasks else 0.0
        for status in WORKFLOW_STATUSES
    ]
    return ratios + [
        normalize_value(min(total_tasks, 50), 0, 50),
        normalize_value(min(max(team_size, 1), 10), 1, 10),
    ]
