from datetime import date

import pytest

from goalplan.errors import CyclicDependencyError
from goalplan.graph import build_task_graph
from goalplan.scheduler import (
    compute_day_offsets,
    end_day_index,
    fit_to_horizon,
    schedule,
    start_day_index,
)
from goalplan.templates import fallback_tasks

START = date(2026, 1, 1)


def test_chain_fits_budget_unscaled(chain_records):
    graph = build_task_graph(chain_records)
    report = schedule(graph, 20, START)

    assert report.horizon == 9
    assert report.scale_factor == 1.0
    assert not report.rescaled
    assert [t.start_day for t in graph] == [0, 2, 5]
    assert [t.end_day for t in graph] == [2, 5, 9]


def test_chain_compressed_to_budget(chain_records):
    graph = build_task_graph(chain_records)
    report = schedule(graph, 4.5, START)

    assert report.scale_factor == pytest.approx(0.5)
    assert [t.end_day for t in graph] == pytest.approx([1, 2.5, 4.5])
    assert [t.estimated_duration_days for t in graph] == pytest.approx([1, 1.5, 2])


def test_calendar_dates_floor_start_and_ceil_end(chain_records):
    graph = build_task_graph(chain_records)
    schedule(graph, 4.5, START)

    polish = graph["T-3"]  # days 2.5 .. 4.5
    assert polish.start_date == date(2026, 1, 3)
    assert polish.end_date == date(2026, 1, 6)


def test_day_index_ignores_float_noise():
    assert start_day_index(2.9999999999999996) == 3
    assert end_day_index(2.0000000000000004) == 2
    assert end_day_index(2.5) == 3


def test_single_task_matching_budget():
    graph = build_task_graph([{"title": "Only", "estimatedDurationDays": 7}])
    report = schedule(graph, 7, START)
    assert report.scale_factor == 1.0
    assert graph["T-1"].start_day == 0
    assert graph["T-1"].end_day == 7


def test_zero_duration_milestone():
    graph = build_task_graph([
        {"title": "Work", "estimatedDurationDays": 3},
        {"title": "Sign-off", "estimatedDurationDays": 0, "dependsOn": [0]},
    ])
    schedule(graph, 10, START)
    milestone = graph["T-2"]
    assert milestone.start_day == milestone.end_day == 3


def test_parallel_branches_start_after_latest_dependency():
    graph = build_task_graph([
        {"title": "A", "estimatedDurationDays": 2},
        {"title": "B", "estimatedDurationDays": 5},
        {"title": "C", "estimatedDurationDays": 1, "dependsOn": [0, 1]},
    ])
    horizon = compute_day_offsets(graph)
    assert graph["T-3"].start_day == 5
    assert horizon == 6


def test_cycle_raises():
    graph = build_task_graph([
        {"title": "A", "dependsOn": [1]},
        {"title": "B", "dependsOn": [0]},
    ])
    with pytest.raises(CyclicDependencyError) as exc:
        schedule(graph, 10, START)
    assert set(exc.value.cycle) == {"T-1", "T-2"}


def test_self_dependency_is_a_cycle():
    graph = build_task_graph([{"title": "A", "dependsOn": [0]}])
    with pytest.raises(CyclicDependencyError) as exc:
        compute_day_offsets(graph)
    assert exc.value.cycle == ["T-1"]


def test_rescaling_is_idempotent(chain_records):
    graph = build_task_graph(chain_records)
    schedule(graph, 4.5, START)
    before = [(t.start_day, t.end_day) for t in graph]

    assert fit_to_horizon(graph, 4.5) == 1.0
    assert [(t.start_day, t.end_day) for t in graph] == before


def test_non_positive_budget_rejected(chain_records):
    graph = build_task_graph(chain_records)
    compute_day_offsets(graph)
    with pytest.raises(ValueError):
        fit_to_horizon(graph, 0)


@pytest.mark.parametrize("goal_text", ["Launch a product", "Run a marketing campaign", "Host a conference", "Learn the cello"])
@pytest.mark.parametrize("total_days", [1, 7, 14, 45.5])
def test_schedule_invariants_on_templates(goal_text, total_days):
    graph = build_task_graph(fallback_tasks(goal_text, total_days))
    schedule(graph, total_days, START)

    for task in graph:
        assert task.end_day >= task.start_day
        assert task.end_day - task.start_day == pytest.approx(task.estimated_duration_days, abs=1e-9)
        dep_ends = [d.end_day for d in graph.dependencies_of(task.id)]
        if dep_ends:
            assert task.start_day >= max(dep_ends) - 1e-9
            assert task.start_day == pytest.approx(max(dep_ends))
        else:
            assert task.start_day == 0
    assert max(t.end_day for t in graph) <= total_days + 1e-9
