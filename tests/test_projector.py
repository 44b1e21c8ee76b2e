from datetime import date

import pytest

from goalplan.planner import build_goal
from goalplan.projector import WorkloadLevel, project_days, workload_level


def test_days_cover_whole_budget(chain_goal):
    days = project_days(chain_goal)
    assert [d.day_number for d in days] == list(range(21))
    assert days[0].date == chain_goal.start_date
    assert days[20].date == date(2026, 3, 22)


def test_handover_day_orders_start_before_end(chain_goal):
    day2 = project_days(chain_goal)[2]
    assert [e.task.title for e in day2.tasks] == ["Build", "Research"]
    build, research = day2.tasks
    assert build.is_start and not build.is_end
    assert research.is_end and not research.is_start
    assert day2.milestones == ["Complete: Research", "Start: Build"]
    assert day2.workload == 6
    assert day2.level == WorkloadLevel.MODERATE


def test_low_priority_start_is_not_a_milestone(chain_goal):
    day5 = project_days(chain_goal)[5]
    assert day5.milestones == ["Complete: Build"]
    assert day5.workload == 3 + 1


def test_continuing_task_and_progress(chain_goal):
    day3 = project_days(chain_goal)[3]
    (entry,) = day3.tasks
    assert entry.task.title == "Build"
    assert entry.is_continuing
    assert entry.progress == pytest.approx(100 / 3)


def test_free_days_after_horizon(chain_goal):
    day12 = project_days(chain_goal)[12]
    assert day12.tasks == []
    assert day12.workload == 0
    assert day12.level == WorkloadLevel.FREE


def test_each_task_starts_and_ends_exactly_once():
    goal, _ = build_goal(
        "Mixed",
        [
            {"title": "A", "estimatedDurationDays": 1.3},
            {"title": "B", "estimatedDurationDays": 0.4, "dependsOn": [0]},
            {"title": "C", "estimatedDurationDays": 2.6, "dependsOn": [0]},
            {"title": "D", "estimatedDurationDays": 0, "dependsOn": [1, 2]},
        ],
        3.5,
        date(2026, 3, 2),
    )
    days = project_days(goal)
    for task in goal.tasks:
        starts = [d.day_number for d in days for e in d.tasks if e.task.id == task.id and e.is_start]
        ends = [d.day_number for d in days for e in d.tasks if e.task.id == task.id and e.is_end]
        active = [d.day_number for d in days for e in d.tasks if e.task.id == task.id]
        assert len(starts) == 1
        assert len(ends) == 1
        assert starts[0] <= task.start_day
        assert ends[0] >= task.end_day
        assert active == list(range(starts[0], ends[0] + 1))


def test_zero_duration_task_is_complete_on_its_day():
    goal, _ = build_goal(
        "Gate",
        [{"title": "Work", "estimatedDurationDays": 2}, {"title": "Gate", "estimatedDurationDays": 0, "dependsOn": [0]}],
        5,
        date(2026, 3, 2),
    )
    entry = next(e for e in project_days(goal)[2].tasks if e.task.title == "Gate")
    assert entry.is_start and entry.is_end
    assert not entry.is_continuing
    assert entry.progress == 100.0


@pytest.mark.parametrize(
    "score, level",
    [(0, WorkloadLevel.FREE), (1, WorkloadLevel.LIGHT), (4, WorkloadLevel.LIGHT),
     (5, WorkloadLevel.MODERATE), (7, WorkloadLevel.MODERATE), (8, WorkloadLevel.HEAVY)],
)
def test_workload_buckets(score, level):
    assert workload_level(score) == level
