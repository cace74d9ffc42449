"""
Workflow analysis tests: metrics, bottleneck scores, recommendations and insights
"""
import pytest

from projectpilot.core.exceptions import InvalidIdentifierError, ResourceNotFoundError
from projectpilot.ml.runtime import PredictionRuntime
from projectpilot.services.workflow_service import WorkflowAnalyzer, clamp_score, score_level

from tests.helpers import NOW, BrokenModel, FixedClassifier, FixedRegressor, fixed_clock


def model_runtime(dependency_model):
    return PredictionRuntime(
        duration_model=FixedRegressor(2.0),
        category_model=FixedClassifier([0.2, 0.6, 0.2]),
        dependency_model=dependency_model,
    )


def recommendation_types(analysis):
    return [r.type for r in analysis.recommendations]


def insight_types(analysis):
    return [i.type for i in analysis.insights]


@pytest.fixture
async def owner(make_user):
    return await make_user("Olivia Owner")


@pytest.fixture
async def alice(make_user):
    return await make_user("Alice")


@pytest.fixture
def analyzer(repository):
    return WorkflowAnalyzer(repository, PredictionRuntime(), clock=fixed_clock)


@pytest.mark.parametrize("score,level", [
    (0.0, "low"),
    (0.29, "low"),
    (0.3, "medium"),
    (0.59, "medium"),
    (0.6, "high"),
    (1.0, "high"),
])
def test_score_level_thresholds(score, level):
    assert score_level(score) == level


def test_clamp_score_bounds():
    assert clamp_score(1.4) == 1.0
    assert clamp_score(-0.2) == 0.0


async def test_empty_project(analyzer, make_project, owner):
    """A project without tasks yields zero ratios and still recommends something"""
    project = await make_project(owner)

    analysis = await analyzer.analyze(project.id)

    metrics = analysis.metrics
    assert metrics.tasks_by_status == {"todo": 0, "in-progress": 0, "review": 0, "completed": 0}
    assert metrics.total_tasks == 0
    assert metrics.project_progress == 0
    assert metrics.days_remaining == 30
    assert metrics.team_size == 1

    bottlenecks = analysis.bottleneck_analysis
    assert bottlenecks.resource_bottleneck.score == 0
    assert bottlenecks.task_distribution.score == 0
    assert bottlenecks.workflow_efficiency.score == 0.5
    assert bottlenecks.task_dependency.score == 0.5
    assert bottlenecks.priority_alignment.score == 0

    assert recommendation_types(analysis) == ["daily_standups", "retrospective"]
    assert insight_types(analysis) == ["risk", "positive"]
    assert analysis.method == "heuristic"
    assert analysis.analysis_date == NOW
    assert analysis.project_name == project.name


async def test_imbalanced_team_gets_redistribution(analyzer, make_project, make_task, owner, alice):
    """Ten tasks on one member and one on another is a high resource bottleneck"""
    project = await make_project(owner, members=[alice])
    for i in range(10):
        await make_task(project, title=f"Owner task {i}", assigned_to=owner)
    await make_task(project, title="Alice task", assigned_to=alice)

    analysis = await analyzer.analyze(str(project.id))

    resource = analysis.bottleneck_analysis.resource_bottleneck
    assert resource.score == pytest.approx(0.9)
    assert resource.level == "high"
    assert "Olivia Owner" in resource.description
    assert "Alice" in resource.description

    redistribution = analysis.recommendations[0]
    assert redistribution.type == "task_redistribution"
    assert redistribution.priority == "high"
    assert redistribution.action == "redistribute_tasks"
    assert redistribution.details["from"] == {"userId": str(owner.id), "name": "Olivia Owner", "taskCount": 10}
    assert redistribution.details["to"] == {"userId": str(alice.id), "name": "Alice", "taskCount": 1}

    # every task is still todo
    assert recommendation_types(analysis) == ["task_redistribution", "start_tasks", "daily_standups"]


async def test_overloaded_team_without_spare_capacity_needs_resources(analyzer, make_project, make_task,
                                                                      owner, alice):
    project = await make_project(owner, members=[alice])
    for i in range(20):
        await make_task(project, title=f"Owner task {i}", assigned_to=owner, status="completed")
    for i in range(6):
        await make_task(project, title=f"Alice task {i}", assigned_to=alice, status="completed")

    analysis = await analyzer.analyze(project.id)

    assert analysis.bottleneck_analysis.resource_bottleneck.score == pytest.approx(0.7)
    assert recommendation_types(analysis)[0] == "add_resources"


async def test_moderate_imbalance_suggests_reviewing_assignments(analyzer, make_project, make_task, owner, alice):
    project = await make_project(owner, members=[alice])
    for i in range(2):
        await make_task(project, title=f"Owner task {i}", assigned_to=owner, status="completed")
    await make_task(project, title="Alice task", assigned_to=alice, status="completed")

    analysis = await analyzer.analyze(project.id)

    assert analysis.bottleneck_analysis.resource_bottleneck.level == "medium"
    assert recommendation_types(analysis)[0] == "review_assignments"


async def test_in_progress_overload_flags_context_switching(analyzer, make_project, make_task, owner):
    project = await make_project(owner)
    for i in range(4):
        await make_task(project, title=f"Task {i}", status="in-progress", assigned_to=owner)

    analysis = await analyzer.analyze(project.id)

    efficiency = analysis.bottleneck_analysis.workflow_efficiency
    assert efficiency.score == pytest.approx(0.9)
    assert "context switching" in efficiency.description
    assert analysis.bottleneck_analysis.task_distribution.score == 1.0
    assert recommendation_types(analysis) == ["finish_in_progress", "daily_standups", "limit_wip"]


async def test_review_backlog_asks_for_review_capacity(analyzer, make_project, make_task, owner):
    project = await make_project(owner)
    for i in range(3):
        await make_task(project, title=f"Task {i}", status="review")
    await make_task(project, title="Done", status="completed")

    analysis = await analyzer.analyze(project.id)

    distribution = analysis.bottleneck_analysis.task_distribution
    assert distribution.score == pytest.approx(0.875)
    assert "review" in distribution.description
    assert recommendation_types(analysis)[0] == "review_capacity"


async def test_unstarted_high_priority_work(analyzer, make_project, make_task, owner):
    project = await make_project(owner)
    await make_task(project, title="Urgent A", priority="high", status="todo")
    await make_task(project, title="Urgent B", priority="high", status="todo")
    await make_task(project, title="Urgent C", priority="high", status="in-progress")
    await make_task(project, title="Other", priority="low", status="review")

    analysis = await analyzer.analyze(project.id)

    priority = analysis.bottleneck_analysis.priority_alignment
    assert priority.score == pytest.approx(2 / 3, abs=1e-4)
    assert priority.level == "high"
    prioritization = [r for r in analysis.recommendations if r.type == "prioritization"]
    assert len(prioritization) == 1
    assert prioritization[0].details == {"highPriorityTodo": 2}


async def test_team_workload_breakdown(analyzer, make_project, make_task, owner, alice):
    project = await make_project(owner, members=[alice])
    await make_task(project, title="A1", assigned_to=alice, status="todo")
    await make_task(project, title="A2", assigned_to=alice, status="completed")
    await make_task(project, title="Unassigned")

    analysis = await analyzer.analyze(project.id)

    workloads = {w.name: w for w in analysis.metrics.team_workload}
    assert set(workloads) == {"Alice", "Olivia Owner"}
    assert workloads["Alice"].assigned_tasks == 2
    assert workloads["Alice"].tasks_by_status["completed"] == 1
    assert workloads["Olivia Owner"].assigned_tasks == 0
    assert analysis.metrics.project_progress == pytest.approx(1 / 3, abs=1e-4)


async def test_all_scores_stay_in_range(analyzer, make_project, make_task, owner, alice):
    project = await make_project(owner, members=[alice])
    statuses = ["todo", "in-progress", "in-progress", "review", "completed", "in-progress"]
    for i, status in enumerate(statuses):
        await make_task(project, title=f"T{i}", status=status, priority="high", assigned_to=alice)

    analysis = await analyzer.analyze(project.id)

    for value in analysis.bottleneck_analysis.dimensions().values():
        assert 0 <= value.score <= 1
        assert value.level == score_level(value.score)
    assert len(analysis.recommendations) >= 1


async def test_too_many_parallel_tasks_is_a_risk(analyzer, make_project, make_task, owner):
    project = await make_project(owner)
    for i in range(11):
        await make_task(project, title=f"T{i}", status="in-progress")

    analysis = await analyzer.analyze(project.id)

    assert any("11 tasks are in progress" in i.description for i in analysis.insights if i.type == "risk")


async def test_near_deadline_is_urgent(analyzer, make_project, make_task, owner):
    project = await make_project(owner, start_offset_days=-27, duration_days=30)
    await make_task(project, title="Unfinished", status="todo")

    analysis = await analyzer.analyze(project.id)

    assert analysis.metrics.days_remaining == 3
    assert "urgent" in insight_types(analysis)


async def test_overdue_project_reports_negative_days(analyzer, make_project, make_task, owner):
    project = await make_project(owner, start_offset_days=-50, duration_days=40)
    await make_task(project, title="Unfinished", status="todo")

    analysis = await analyzer.analyze(project.id)

    assert analysis.metrics.days_remaining == -10
    urgent = [i for i in analysis.insights if i.type == "urgent"]
    assert "passed 10 days ago" in urgent[0].description


async def test_two_weeks_out_with_low_progress_is_a_risk(analyzer, make_project, make_task, owner):
    project = await make_project(owner, start_offset_days=-20, duration_days=30)
    await make_task(project, title="Done", status="completed")
    await make_task(project, title="Open", status="todo")

    analysis = await analyzer.analyze(project.id)

    assert analysis.metrics.days_remaining == 10
    assert any("10 days remain" in i.description for i in analysis.insights if i.type == "risk")


async def test_ahead_of_schedule_is_positive(analyzer, make_project, make_task, owner):
    project = await make_project(owner, start_offset_days=0, duration_days=60)
    await make_task(project, title="Done", status="completed", assigned_to=owner)

    analysis = await analyzer.analyze(project.id)

    assert any("ahead of schedule" in i.description for i in analysis.insights if i.type == "positive")


async def test_dependency_model_score(repository, make_project, make_task, owner):
    model = FixedRegressor(0.9)
    analyzer = WorkflowAnalyzer(repository, model_runtime(model), clock=fixed_clock)
    project = await make_project(owner)
    await make_task(project, title="T", status="review")

    analysis = await analyzer.analyze(project.id)

    assert analysis.method == "ml"
    assert analysis.bottleneck_analysis.task_dependency.score == 0.9
    assert analysis.bottleneck_analysis.task_dependency.level == "high"
    assert len(model.calls[0][0]) == 6


async def test_failing_dependency_model_falls_back(repository, make_project, owner):
    analyzer = WorkflowAnalyzer(repository, model_runtime(BrokenModel()), clock=fixed_clock)
    project = await make_project(owner)

    analysis = await analyzer.analyze(project.id)

    assert analysis.method == "heuristic"
    assert analysis.bottleneck_analysis.task_dependency.score == 0.5


async def test_missing_project(analyzer):
    with pytest.raises(ResourceNotFoundError):
        await analyzer.analyze("e3b0c442-98fc-4c14-9afb-f4c8996fb924")


async def test_malformed_project_id(analyzer):
    with pytest.raises(InvalidIdentifierError):
        await analyzer.analyze("project-1")


async def test_model_and_heuristic_outputs_share_shape(repository, make_project, make_task, owner):
    project = await make_project(owner)
    await make_task(project, title="T", status="in-progress", assigned_to=owner)

    heuristic = await WorkflowAnalyzer(repository, PredictionRuntime(), clock=fixed_clock).analyze(project.id)
    learned = await WorkflowAnalyzer(repository, model_runtime(FixedRegressor(0.2)), clock=fixed_clock).analyze(project.id)

    heuristic_json = heuristic.model_dump(by_alias=True)
    learned_json = learned.model_dump(by_alias=True)
    assert set(heuristic_json) == set(learned_json)
    assert set(heuristic_json["bottleneckAnalysis"]) == set(learned_json["bottleneckAnalysis"])
    assert set(heuristic_json["metrics"]) == set(learned_json["metrics"])
