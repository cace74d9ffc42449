"""
Task suggestion tests
"""
import random
from types import SimpleNamespace

import pytest

from projectpilot.core.exceptions import InvalidIdentifierError, ResourceNotFoundError, ValidationError
from projectpilot.core.timeutils import ensure_utc
from projectpilot.ml.runtime import PredictionRuntime
from projectpilot.services.suggestion_service import (
    TASK_TEMPLATES,
    KeywordTaskClassifier,
    TaskSuggestionService,
)

from tests.helpers import BrokenModel, FixedClassifier, FixedRegressor, fixed_clock


def project_stub(name, description=""):
    return SimpleNamespace(id="p1", name=name, description=description)


def task_stub(title):
    return SimpleNamespace(title=title)


def model_runtime(category_model):
    return PredictionRuntime(
        duration_model=FixedRegressor(2.0),
        category_model=category_model,
        dependency_model=FixedRegressor(0.4),
    )


def build_service(repository, runtime=None, seed=7):
    return TaskSuggestionService(
        repository, runtime or PredictionRuntime(), rng=random.Random(seed), clock=fixed_clock
    )


class TestKeywordTaskClassifier:

    def test_name_keywords_count_double(self):
        scores = KeywordTaskClassifier().score(project_stub("Marketing campaign", "new app"), [])

        assert scores["marketing"] == 4
        assert scores["development"] == 1

    def test_existing_task_titles_contribute(self):
        classification = KeywordTaskClassifier().classify(
            project_stub("Q3 initiative"),
            [task_stub("Write backend code"), task_stub("Fix frontend")],
        )

        assert classification.category == "development"
        assert classification.confidence == 1.0
        assert classification.method == "heuristic"

    def test_no_keywords_defaults_to_general(self):
        classification = KeywordTaskClassifier().classify(project_stub("Zeta", "Omega"), [])

        assert classification.category == "general"
        assert classification.confidence == 0.5

    def test_tied_top_score_defaults_to_general(self):
        classification = KeywordTaskClassifier().classify(project_stub("", "code campaign"), [])

        assert classification.category == "general"

    def test_confidence_is_share_of_total_score(self):
        # development: "software" x2 = 2, general: "team" = 1
        classification = KeywordTaskClassifier().classify(project_stub("Software", "for the team"), [])

        assert classification.category == "development"
        assert classification.confidence == pytest.approx(2 / 3)


@pytest.fixture
async def owner(make_user):
    return await make_user("Olivia Owner")


async def test_suggestions_skip_existing_titles(repository, make_project, make_task, owner):
    """Titles already in the project never come back, whatever their case"""
    project = await make_project(owner, name="Web app", description="Build the software")
    await make_task(project, title="setup DEVELOPMENT environment")
    await make_task(project, title="Create Project Structure")
    service = build_service(repository)

    suggestions = await service.suggest_tasks(project.id, count=5)

    titles = [s.title.lower() for s in suggestions]
    assert len(suggestions) == 5
    assert "setup development environment" not in titles
    assert "create project structure" not in titles
    assert titles[0] == "setup version control"
    assert {s.category for s in suggestions} <= {"setup", "planning", "implementation"}


async def test_suggestion_fields(repository, make_user, make_project, owner):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    project = await make_project(owner, members=[alice, bob], name="Web app", description="")
    service = build_service(repository)

    suggestions = await service.suggest_tasks(str(project.id), count=4)

    start = ensure_utc(project.start_date)
    end = ensure_utc(project.end_date)
    for suggestion in suggestions:
        assert start <= ensure_utc(suggestion.due_date) <= end
        assert suggestion.assigned_to in {alice.id, bob.id}
        assert suggestion.created_by == owner.id
        assert suggestion.project == project.id
        assert suggestion.status == "todo"
        assert suggestion.method == "heuristic"
        assert suggestion.confidence == "100.00"
        assert suggestion.description == f'AI-suggested task: {suggestion.title} for project "Web app"'


async def test_owner_is_assignee_without_members(repository, make_project, owner):
    project = await make_project(owner)
    service = build_service(repository)

    suggestions = await service.suggest_tasks(project.id, count=3)

    assert {s.assigned_to for s in suggestions} == {owner.id}


async def test_general_templates_are_not_repeated(repository, make_project, owner):
    project = await make_project(owner, name="Quarterly planning", description="Schedule team meetings")
    service = build_service(repository)

    suggestions = await service.suggest_tasks(project.id, count=20)

    titles = [s.title for s in suggestions]
    assert len(titles) == len(set(titles))
    assert titles[:len(TASK_TEMPLATES["general"])] == [t["title"] for t in TASK_TEMPLATES["general"]]
    assert "Project milestone 1" in titles
    assert len(suggestions) <= 20


async def test_generic_tasks_fill_exhausted_templates(repository, make_project, make_task, owner):
    project = await make_project(owner, name="Zeta", description="Omega")
    for template in TASK_TEMPLATES["general"]:
        await make_task(project, title=template["title"])
    service = build_service(repository)

    suggestions = await service.suggest_tasks(project.id, count=3)

    titles = [s.title for s in suggestions]
    assert len(titles) == 3
    assert titles[0] == f"Project milestone {len(TASK_TEMPLATES['general']) + 1}"
    assert titles[1].startswith("Weekly team meeting ")
    assert titles[2].startswith("Review progress for week ")


async def test_seeded_random_source_is_reproducible(repository, make_user, make_project, owner):
    members = [await make_user(f"Member {i}") for i in range(4)]
    project = await make_project(owner, members=members)

    first = await build_service(repository, seed=11).suggest_tasks(project.id, count=5)
    second = await build_service(repository, seed=11).suggest_tasks(project.id, count=5)

    assert [(s.title, s.due_date, s.assigned_to) for s in first] == \
        [(s.title, s.due_date, s.assigned_to) for s in second]


async def test_model_classification(repository, make_project, owner):
    project = await make_project(owner, name="Zeta", description="Omega")
    service = build_service(repository, model_runtime(FixedClassifier([0.1, 0.2, 0.7])))

    suggestions = await service.suggest_tasks(project.id, count=2)

    assert [s.title for s in suggestions] == ["Define target audience", "Conduct market research"]
    assert {s.method for s in suggestions} == {"ml"}
    assert {s.confidence for s in suggestions} == {"70.00"}


async def test_failing_model_uses_keywords(repository, make_project, owner):
    project = await make_project(owner, name="Web app", description="")
    service = build_service(repository, model_runtime(BrokenModel()))

    suggestions = await service.suggest_tasks(project.id, count=1)

    assert suggestions[0].method == "heuristic"
    assert suggestions[0].title == "Setup development environment"


async def test_default_count_is_three(repository, make_project, owner):
    project = await make_project(owner)

    assert len(await build_service(repository).suggest_tasks(project.id)) == 3


async def test_count_must_be_positive(repository, make_project, owner):
    project = await make_project(owner)

    with pytest.raises(ValidationError):
        await build_service(repository).suggest_tasks(project.id, count=0)


async def test_missing_project(repository):
    with pytest.raises(ResourceNotFoundError):
        await build_service(repository).suggest_tasks("0b0bd59a-0000-4000-8000-000000000000")


async def test_malformed_project_id(repository):
    with pytest.raises(InvalidIdentifierError):
        await build_service(repository).suggest_tasks("abc")
