"""MCP server for goalplan: exposes plan generation and plan views to AI assistants."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from goalplan.config import Settings
from goalplan.export import export_filename, load_goal, render, save_goal
from goalplan.models import Goal, Task, TaskStatus
from goalplan.planner import build_goal, critical_path_for, generate_plan, resolve_total_days, set_status
from goalplan.projector import project_days
from goalplan.stats import compute_stats

mcp = FastMCP(
    "goalplan",
    instructions="""\
goalplan turns a free-text goal plus a time budget into a scheduled plan of \
dependent tasks. Each task has a category (Planning, Design, Development, \
Testing, Deployment), a priority (High, Medium, Low), a duration in days and \
fractional start/end day offsets from day 0 of the plan.

Key concepts:
- **Budget**: total days available, or a due date. A schedule longer than the \
budget is compressed proportionally to fit; a shorter one is left alone.
- **Dependencies**: a task starts when the last task it depends on ends.
- **Critical path**: tasks on a longest dependency chain; delaying them delays the plan.
- **Workload**: per-day score (High=3, Medium=2, Low=1 per active task), \
bucketed Free / Light / Moderate / Heavy.

Typical workflow:
1. generate_plan (or import_tasks for a task list produced elsewhere)
2. get_schedule, get_day_plan, get_critical_path, get_stats to read it
3. set_task_status as work progresses
4. export_plan to write JSON, CSV, Markdown or iCalendar
""",
)


def _plan_path(plan_file: str | None) -> Path:
    return Path(plan_file or Settings.from_env().plan_file)


def _require_goal(plan_file: str | None) -> Goal:
    path = _plan_path(plan_file)
    try:
        goal = load_goal(path)
    except (ValueError, KeyError, TypeError) as e:
        raise ValueError(f"Could not read plan file {path}: {e}") from e
    if goal is None:
        raise ValueError("No plan found. Call generate_plan first.")
    return goal


def _task_to_dict(t: Task, critical: bool) -> dict:
    d = t.to_dict()
    d["startDay"] = round(t.start_day, 2)
    d["endDay"] = round(t.end_day, 2)
    d["estimatedDurationDays"] = round(t.estimated_duration_days, 2)
    d["isCritical"] = critical
    return d


def _summary(goal: Goal, source: str | None = None) -> dict:
    crit = critical_path_for(goal)
    result = {
        "title": goal.title,
        "totalDays": goal.total_days,
        "startDate": goal.start_date.isoformat(),
        "taskCount": len(goal.tasks),
        "horizon": round(goal.horizon, 2),
        "criticalTasks": list(crit.task_ids),
    }
    if source:
        result["source"] = source
    return result


@mcp.tool(name="generate_plan")
async def generate_plan_tool(
    goal: str,
    total_days: float | None = None,
    due_date: str | None = None,
    start_date: str | None = None,
    plan_file: str | None = None,
) -> str:
    """Generate and save a plan for a goal.

    Args:
        goal: Free-text goal (e.g. "Launch a mobile app")
        total_days: Days available (default 14); ignored when due_date is set
        due_date: Due date (YYYY-MM-DD)
        start_date: Day 0 of the plan (YYYY-MM-DD), default today
        plan_file: Where to save the plan (default plan.json)
    """
    try:
        due = date.fromisoformat(due_date) if due_date else None
        start = date.fromisoformat(start_date) if start_date else None
        result = await generate_plan(goal, total_days, due, start_date=start)
    except ValueError as e:
        return f"Error: {e}"

    save_goal(result.goal, _plan_path(plan_file))
    return json.dumps(_summary(result.goal, result.source), indent=2)


@mcp.tool()
def import_tasks(
    title: str,
    tasks_json: list[dict],
    total_days: float | None = None,
    due_date: str | None = None,
    start_date: str | None = None,
    plan_file: str | None = None,
) -> str:
    """Schedule a task list produced elsewhere and save it as the current plan.

    Args:
        title: Goal title
        tasks_json: Records with title, description, category, priority,
            estimatedDurationDays and dependsOn (indices into this list)
        total_days: Days available (default 14); ignored when due_date is set
        due_date: Due date (YYYY-MM-DD)
        start_date: Day 0 of the plan (YYYY-MM-DD), default today
        plan_file: Where to save the plan (default plan.json)
    """
    try:
        start = date.fromisoformat(start_date) if start_date else date.today()
        due = date.fromisoformat(due_date) if due_date else None
        days = resolve_total_days(total_days, due, start, Settings.from_env().default_total_days)
        goal, _ = build_goal(title, tasks_json, days, start, due)
    except ValueError as e:
        return f"Error: {e}"

    save_goal(goal, _plan_path(plan_file))
    return json.dumps(_summary(goal, "import"), indent=2)


@mcp.tool()
def get_schedule(plan_file: str | None = None) -> str:
    """Get every task with its day offsets, dates, status and critical flag."""
    try:
        goal = _require_goal(plan_file)
        crit = critical_path_for(goal)
    except ValueError as e:
        return f"Error: {e}"
    return json.dumps([_task_to_dict(t, t.id in crit) for t in goal.tasks], indent=2)


@mcp.tool()
def get_critical_path(plan_file: str | None = None) -> str:
    """Get the tasks on the critical path and its total length in days."""
    try:
        goal = _require_goal(plan_file)
        crit = critical_path_for(goal)
    except ValueError as e:
        return f"Error: {e}"

    result = {
        "length_days": round(crit.length, 2),
        "task_count": len(crit),
        "tasks": [_task_to_dict(t, True) for t in goal.tasks if t.id in crit],
    }
    return json.dumps(result, indent=2)


@mcp.tool()
def get_day_plan(day: int | None = None, plan_file: str | None = None) -> str:
    """Get the day-by-day view: active tasks, milestones and workload.

    Args:
        day: Day number (0-based) to return; all days when omitted
    """
    try:
        goal = _require_goal(plan_file)
    except ValueError as e:
        return f"Error: {e}"

    all_days = project_days(goal)
    plans = all_days
    if day is not None:
        plans = [p for p in all_days if p.day_number == day]
        if not plans:
            return f"Error: day {day} is outside the plan (0-{len(all_days) - 1})."

    result = []
    for p in plans:
        result.append({
            "day": p.day_number,
            "date": p.date.isoformat(),
            "workload": p.workload,
            "level": p.level.value,
            "milestones": p.milestones,
            "tasks": [
                {
                    "id": e.task.id,
                    "title": e.task.title,
                    "isStart": e.is_start,
                    "isEnd": e.is_end,
                    "isContinuing": e.is_continuing,
                    "progress": round(e.progress, 1),
                }
                for e in p.tasks
            ],
        })
    return json.dumps(result, indent=2)


@mcp.tool()
def get_stats(plan_file: str | None = None) -> str:
    """Get plan statistics: progress, counts by priority and category, schedule length."""
    try:
        goal = _require_goal(plan_file)
        stats = compute_stats(goal, critical_task_count=len(critical_path_for(goal)))
    except ValueError as e:
        return f"Error: {e}"
    return json.dumps(stats.to_dict(), indent=2)


@mcp.tool()
def set_task_status(task_id: str, status: str, plan_file: str | None = None) -> str:
    """Change a task's status. Scheduling fields are never changed.

    Args:
        task_id: Task ID (e.g. "T-5")
        status: Target status: "pending", "in_progress", or "completed"
    """
    try:
        new_status = TaskStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in TaskStatus)
        return f"Error: invalid status '{status}'. Valid: {valid}"

    try:
        goal = _require_goal(plan_file)
        updated = set_status(goal, task_id, new_status)
    except ValueError as e:
        return f"Error: {e}"

    old = goal.task(task_id).status
    save_goal(updated, _plan_path(plan_file))
    return f"Set {task_id} from {old.value} to {new_status.value}."


@mcp.tool()
def export_plan(fmt: str, output: str | None = None, plan_file: str | None = None) -> str:
    """Export the plan to a file.

    Args:
        fmt: One of json, csv, md, ics
        output: Output path; defaults to the goal title with the format's extension
    """
    try:
        goal = _require_goal(plan_file)
        content = render(goal, fmt.lower())
    except ValueError as e:
        return f"Error: {e}"

    out = Path(output or export_filename(goal, fmt.lower()))
    out.write_text(content, newline="")
    return f"Exported {len(goal.tasks)} tasks to {out}"


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
