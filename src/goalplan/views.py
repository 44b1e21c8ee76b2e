"""Read-only view models over a scheduled goal: timeline and dependency graph."""

from __future__ import annotations

import math
from dataclasses import dataclass

from goalplan.critical_path import CriticalPath
from goalplan.models import Goal, Task, TaskStatus

LEVEL_WIDTH_DAYS = 5


@dataclass(frozen=True)
class TimelineBar:
    task: Task
    left_pct: float
    width_pct: float


def timeline_markers(total_days: float) -> list[float]:
    """Axis ticks for the timeline, always ending on ``total_days``."""
    if total_days <= 7:
        step = 1
    elif total_days <= 14:
        step = 2
    elif total_days <= 30:
        step = 5
    else:
        step = 10
    markers: list[float] = list(range(0, math.floor(total_days) + 1, step))
    if markers[-1] != total_days:
        markers.append(total_days)
    return markers


def timeline_bars(goal: Goal) -> list[TimelineBar]:
    """Gantt bars as percentages of the day budget, earliest start first."""
    bars = []
    for task in sorted(goal.tasks, key=lambda t: t.start_day):
        bars.append(
            TimelineBar(
                task=task,
                left_pct=task.start_day / goal.total_days * 100,
                width_pct=(task.end_day - task.start_day) / goal.total_days * 100,
            )
        )
    return bars


def dependency_levels(goal: Goal) -> list[tuple[int, list[Task]]]:
    """Group tasks into columns of ``LEVEL_WIDTH_DAYS`` by start day."""
    levels: dict[int, list[Task]] = {}
    for task in goal.tasks:
        levels.setdefault(math.floor(task.start_day / LEVEL_WIDTH_DAYS), []).append(task)
    return sorted(levels.items())


def to_mermaid(goal: Goal, critical: CriticalPath, hide_done: bool = False) -> str:
    """Mermaid flowchart of the dependency graph, critical tasks highlighted."""
    lines = ["```mermaid", "flowchart LR"]

    lines.append("    classDef done fill:#2d6a4f,stroke:#1b4332,color:#d8f3dc")
    lines.append("    classDef inprog fill:#e76f51,stroke:#f4a261,color:#fff")
    lines.append("    classDef crit fill:#d4a373,stroke:#e76f51,color:#000,stroke-width:3px")
    lines.append("    classDef default fill:#457b9d,stroke:#1d3557,color:#f1faee")

    shown = [t for t in goal.tasks if not (hide_done and t.status == TaskStatus.COMPLETED)]
    shown_ids = {t.id for t in shown}

    for task in shown:
        label = task.title.replace('"', "'")
        lines.append(f'    {_node(task.id)}["{task.id}: {label}<br/>{task.estimated_duration_days:.1f}d"]')

    for task in shown:
        for dep in task.dependencies:
            if dep in shown_ids:
                lines.append(f"    {_node(dep)} --> {_node(task.id)}")

    done_ids = [_node(t.id) for t in shown if t.status == TaskStatus.COMPLETED]
    inprog_ids = [_node(t.id) for t in shown if t.status == TaskStatus.IN_PROGRESS]
    crit_only = [_node(t.id) for t in shown if t.id in critical and t.status == TaskStatus.PENDING]

    if done_ids:
        lines.append(f"    class {','.join(done_ids)} done")
    if inprog_ids:
        lines.append(f"    class {','.join(inprog_ids)} inprog")
    if crit_only:
        lines.append(f"    class {','.join(crit_only)} crit")

    lines.append("```")
    return "\n".join(lines) + "\n"


def _node(task_id: str) -> str:
    # Mermaid node ids can't contain '-'
    return task_id.replace("-", "_")
