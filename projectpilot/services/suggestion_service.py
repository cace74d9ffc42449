"""
Task suggestion service

Classifies a project into a template category and drafts new tasks from the
matching templates, skipping anything the project already has.
"""
import logging
import random
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, Dict, List, NamedTuple, Optional

from projectpilot.config import settings
from projectpilot.core.exceptions import ResourceNotFoundError, ValidationError
from projectpilot.core.timeutils import ensure_utc, utcnow
from projectpilot.ml.features import days_between, extract_project_features
from projectpilot.ml.runtime import METHOD_HEURISTIC, METHOD_ML, PredictionRuntime
from projectpilot.schemas.ai import SuggestedTask
from projectpilot.services.repository import WorkspaceRepository, parse_identifier

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = 'general'

TASK_TEMPLATES: Dict[str, List[Dict[str, str]]] = {
    'development': [
        {'title': 'Setup development environment', 'priority': 'high', 'category': 'setup'},
        {'title': 'Create project structure', 'priority': 'high', 'category': 'setup'},
        {'title': 'Setup version control', 'priority': 'high', 'category': 'setup'},
        {'title': 'Define API endpoints', 'priority': 'medium', 'category': 'planning'},
        {'title': 'Create database schema', 'priority': 'high', 'category': 'planning'},
        {'title': 'Implement authentication', 'priority': 'high', 'category': 'implementation'},
        {'title': 'Implement user management', 'priority': 'medium', 'category': 'implementation'},
        {'title': 'Create frontend components', 'priority': 'medium', 'category': 'implementation'},
        {'title': 'Setup CI/CD pipeline', 'priority': 'medium', 'category': 'infrastructure'},
        {'title': 'Write unit tests', 'priority': 'medium', 'category': 'testing'},
        {'title': 'Perform integration testing', 'priority': 'medium', 'category': 'testing'},
        {'title': 'Deploy to staging', 'priority': 'medium', 'category': 'deployment'},
        {'title': 'Deploy to production', 'priority': 'high', 'category': 'deployment'},
        {'title': 'Write documentation', 'priority': 'low', 'category': 'documentation'},
    ],
    'marketing': [
        {'title': 'Define target audience', 'priority': 'high', 'category': 'planning'},
        {'title': 'Conduct market research', 'priority': 'high', 'category': 'research'},
        {'title': 'Create marketing strategy', 'priority': 'high', 'category': 'planning'},
        {'title': 'Design marketing materials', 'priority': 'medium', 'category': 'creation'},
        {'title': 'Setup social media accounts', 'priority': 'medium', 'category': 'setup'},
        {'title': 'Create content calendar', 'priority': 'medium', 'category': 'planning'},
        {'title': 'Launch social media campaign', 'priority': 'high', 'category': 'execution'},
        {'title': 'Monitor campaign performance', 'priority': 'medium', 'category': 'monitoring'},
        {'title': 'Create analytical report', 'priority': 'low', 'category': 'reporting'},
    ],
    'general': [
        {'title': 'Define project scope', 'priority': 'high', 'category': 'planning'},
        {'title': 'Create project timeline', 'priority': 'high', 'category': 'planning'},
        {'title': 'Assign team members', 'priority': 'high', 'category': 'planning'},
        {'title': 'Schedule kick-off meeting', 'priority': 'medium', 'category': 'communication'},
        {'title': 'Create progress reporting template', 'priority': 'low', 'category': 'communication'},
        {'title': 'Conduct weekly status meetings', 'priority': 'medium', 'category': 'communication'},
        {'title': 'Review project milestones', 'priority': 'medium', 'category': 'monitoring'},
        {'title': 'Prepare final delivery', 'priority': 'high', 'category': 'execution'},
        {'title': 'Project retrospective', 'priority': 'low', 'category': 'closure'},
    ],
}

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    'development': ['develop', 'code', 'program', 'software', 'app', 'application', 'web', 'api',
                    'database', 'frontend', 'backend'],
    'marketing': ['market', 'campaign', 'content', 'social', 'brand', 'audience', 'promotion',
                  'advertis', 'seo', 'media'],
    'general': ['project', 'manage', 'plan', 'organiz', 'schedule', 'team', 'task', 'document',
                'meet', 'report'],
}

NAME_WEIGHT = 2
NEUTRAL_CONFIDENCE = 0.5


class Classification(NamedTuple):
    category: str
    confidence: float
    method: str


def count_keywords(text: str, keywords: List[str]) -> int:
    return sum(text.count(keyword) for keyword in keywords)


class TaskClassifier(ABC):
    """Assigns a project to one of the template categories."""

    @abstractmethod
    def classify(self, project, existing_tasks) -> Classification:
        pass


class KeywordTaskClassifier(TaskClassifier):

    def score(self, project, existing_tasks) -> Dict[str, int]:
        name = (project.name or '').lower()
        description = (project.description or '').lower()
        task_titles = ' '.join((task.title or '').lower() for task in existing_tasks)

        return {
            category: (
                count_keywords(name, keywords) * NAME_WEIGHT
                + count_keywords(description, keywords)
                + count_keywords(task_titles, keywords)
            )
            for category, keywords in CATEGORY_KEYWORDS.items()
        }

    def classify(self, project, existing_tasks) -> Classification:
        scores = self.score(project, existing_tasks)
        total = sum(scores.values())
        if total == 0:
            return Classification(GENERAL_CATEGORY, NEUTRAL_CONFIDENCE, METHOD_HEURISTIC)

        best = max(scores.values())
        leaders = [category for category, value in scores.items() if value == best]
        category = leaders[0] if len(leaders) == 1 else GENERAL_CATEGORY

        logger.debug(f"Keyword scores for project {project.id}: {scores}")
        return Classification(category, scores[category] / total, METHOD_HEURISTIC)


class ModelTaskClassifier(TaskClassifier):

    def __init__(self, model, fallback: TaskClassifier, clock: Callable = utcnow):
        self.model = model
        self.fallback = fallback
        self.clock = clock

    def classify(self, project, existing_tasks) -> Classification:
        try:
            features = extract_project_features(project, len(existing_tasks), self.clock())
            probabilities = list(self.model.predict_proba([features])[0])
            index = max(range(len(probabilities)), key=probabilities.__getitem__)
            category = str(self.model.classes_[index])
            confidence = float(probabilities[index])
        except Exception as e:
            logger.warning(f"Category model failed for project {project.id}, using keywords: {e}")
            return self.fallback.classify(project, existing_tasks)

        if category not in TASK_TEMPLATES:
            category = GENERAL_CATEGORY
        return Classification(category, confidence, METHOD_ML)


def build_task_classifier(runtime: PredictionRuntime, clock: Callable = utcnow) -> TaskClassifier:
    keywords = KeywordTaskClassifier()
    if runtime.uses_model:
        return ModelTaskClassifier(runtime.category_model, keywords, clock)
    return keywords


class TaskSuggestionService:
    """Drafts new tasks for a project"""

    def __init__(
        self,
        repository: WorkspaceRepository,
        runtime: PredictionRuntime,
        rng: Optional[random.Random] = None,
        clock: Callable = utcnow,
    ):
        self.repository = repository
        self.rng = rng or random.Random()
        self.clock = clock
        self.classifier = build_task_classifier(runtime, clock)

    def _generic_templates(self, existing_count: int) -> List[Dict[str, str]]:
        return [
            {'title': f'Project milestone {existing_count + 1}', 'priority': 'high', 'category': 'milestone'},
            {'title': f'Weekly team meeting {self.rng.randint(1, 10)}', 'priority': 'medium', 'category': 'meeting'},
            {'title': f'Review progress for week {self.rng.randint(1, 10)}', 'priority': 'medium', 'category': 'review'},
        ]

    def _candidate_templates(self, category: str, existing_tasks, count: int) -> List[Dict[str, str]]:
        existing_titles = {(task.title or '').lower() for task in existing_tasks}

        pool = list(TASK_TEMPLATES.get(category, []))
        if category != GENERAL_CATEGORY:
            pool.extend(TASK_TEMPLATES[GENERAL_CATEGORY])

        candidates = [t for t in pool if t['title'].lower() not in existing_titles]
        if len(candidates) < count:
            logger.info(f"Only {len(candidates)} template tasks left, adding generic tasks")
            seen = existing_titles | {t['title'].lower() for t in candidates}
            for template in self._generic_templates(len(existing_tasks)):
                if template['title'].lower() not in seen:
                    candidates.append(template)
                    seen.add(template['title'].lower())
        return candidates

    def _due_date(self, project):
        start = ensure_utc(project.start_date)
        span_days = max(0.0, days_between(start, project.end_date))
        return start + timedelta(days=int(self.rng.random() * span_days))

    def _assignee(self, project):
        member_ids = project.member_ids
        if member_ids:
            return self.rng.choice(member_ids)
        return project.owner_id

    async def suggest_tasks(self, project_id, count: Optional[int] = None) -> List[SuggestedTask]:
        """Suggest up to `count` new tasks for a project"""
        project_uuid = parse_identifier(project_id, "Project")
        count = settings.suggestion_default_count if count is None else count
        if count < 1:
            raise ValidationError("Suggestion count must be at least 1")

        logger.info(f"Generating {count} task suggestions for project ID: {project_uuid}")
        project = await self.repository.get_project(project_uuid)
        if not project:
            logger.warning(f"Project not found with ID: {project_uuid}")
            raise ResourceNotFoundError("Project")

        existing_tasks = await self.repository.list_project_tasks(project_uuid)
        classification = self.classifier.classify(project, existing_tasks)
        logger.info(
            f"Project '{project.name}' classified as {classification.category} "
            f"(confidence: {classification.confidence * 100:.2f}%, method: {classification.method})"
        )

        templates = self._candidate_templates(classification.category, existing_tasks, count)[:count]
        suggestions = [
            SuggestedTask(
                title=template['title'],
                priority=template['priority'],
                category=template['category'],
                description=f'AI-suggested task: {template["title"]} for project "{project.name}"',
                due_date=self._due_date(project),
                project=project.id,
                assigned_to=self._assignee(project),
                created_by=project.owner_id,
                confidence=f"{classification.confidence * 100:.2f}",
                method=classification.method,
            )
            for template in templates
        ]

        logger.info(f"Generated {len(suggestions)} task suggestions for project {project.name}")
        return suggestions
