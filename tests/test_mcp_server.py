import json

import pytest

from goalplan.export import load_goal
from goalplan.mcp_server import get_day_plan, get_schedule, import_tasks, set_task_status
from goalplan.models import TaskStatus

RECORDS = [
    {"title": "Outline", "priority": "High", "estimatedDurationDays": 1},
    {"title": "Draft", "estimatedDurationDays": 3, "dependsOn": [0]},
]


@pytest.fixture
def plan_file(tmp_path):
    path = tmp_path / "plan.json"
    out = import_tasks("Essay", RECORDS, total_days=6, start_date="2026-03-02", plan_file=str(path))
    assert json.loads(out)["taskCount"] == 2
    return str(path)


def test_import_tasks_cycle_is_reported(tmp_path):
    path = tmp_path / "plan.json"
    out = import_tasks("Loop", [{"title": "A", "dependsOn": [1]}, {"title": "B", "dependsOn": [0]}], plan_file=str(path))
    assert out.startswith("Error: Circular dependency")
    assert not path.exists()


def test_set_task_status(plan_file):
    out = set_task_status("T-1", "completed", plan_file=plan_file)
    assert out == "Set T-1 from pending to completed."

    goal = load_goal(plan_file)
    assert goal.task("T-1").status == TaskStatus.COMPLETED
    assert goal.task("T-2").status == TaskStatus.PENDING


def test_set_task_status_errors(plan_file):
    assert set_task_status("T-1", "done", plan_file=plan_file).startswith("Error: invalid status")
    assert set_task_status("T-9", "completed", plan_file=plan_file) == "Error: Task T-9 not found"


def test_get_day_plan(plan_file):
    days = json.loads(get_day_plan(plan_file=plan_file))
    assert [d["day"] for d in days] == list(range(7))

    day1 = json.loads(get_day_plan(day=1, plan_file=plan_file))
    assert len(day1) == 1
    assert day1[0]["date"] == "2026-03-03"
    assert day1[0]["milestones"] == ["Complete: Outline"]
    assert [t["id"] for t in day1[0]["tasks"]] == ["T-2", "T-1"]


def test_get_day_plan_out_of_range(plan_file):
    assert get_day_plan(day=30, plan_file=plan_file) == "Error: day 30 is outside the plan (0-6)."


def test_missing_and_corrupt_plan_files(tmp_path):
    assert get_schedule(plan_file=str(tmp_path / "none.json")).startswith("Error: No plan found")

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({
        "id": "abc", "title": "Broken", "totalDays": 5, "startDate": "2026-03-02",
        "createdAt": "2026-03-01T09:00:00", "tasks": None,
    }))
    assert get_schedule(plan_file=str(bad)).startswith("Error: Could not read plan file")
