"""Day-by-day projection of a scheduled plan."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from goalplan.models import Goal, Task, TaskPriority
from goalplan.scheduler import end_day_index, start_day_index

PRIORITY_WEIGHTS: dict[TaskPriority, int] = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}


class WorkloadLevel(enum.StrEnum):
    FREE = "Free"
    LIGHT = "Light"
    MODERATE = "Moderate"
    HEAVY = "Heavy"


def workload_level(score: int) -> WorkloadLevel:
    if score >= 8:
        return WorkloadLevel.HEAVY
    if score >= 5:
        return WorkloadLevel.MODERATE
    if score > 0:
        return WorkloadLevel.LIGHT
    return WorkloadLevel.FREE


@dataclass(frozen=True)
class DayTask:
    task: Task
    is_start: bool
    is_end: bool
    is_continuing: bool
    progress: float  # percent of the task's span elapsed at the start of the day


@dataclass
class DayPlan:
    day_number: int
    date: date
    tasks: list[DayTask] = field(default_factory=list)
    milestones: list[str] = field(default_factory=list)
    workload: int = 0

    @property
    def level(self) -> WorkloadLevel:
        return workload_level(self.workload)


def task_progress(task: Task, day: int) -> float:
    span = task.end_day - task.start_day
    if span <= 0:
        return 100.0
    return min(100.0, max(0.0, (day - task.start_day) / span * 100))


def project_day(tasks: list[Task] | tuple[Task, ...], day: int, start_date: date) -> DayPlan:
    plan = DayPlan(day_number=day, date=start_date + timedelta(days=day))
    entries: list[DayTask] = []

    for task in tasks:
        first = start_day_index(task.start_day)
        last = end_day_index(task.end_day)
        if not first <= day <= last:
            continue

        is_start = day == first
        is_end = day == last
        entries.append(
            DayTask(
                task=task,
                is_start=is_start,
                is_end=is_end,
                is_continuing=not is_start and not is_end,
                progress=task_progress(task, day),
            )
        )
        plan.workload += PRIORITY_WEIGHTS[task.priority]

        if is_end:
            plan.milestones.append(f"Complete: {task.title}")
        if is_start and task.priority == TaskPriority.HIGH:
            plan.milestones.append(f"Start: {task.title}")

    # Starting tasks first, ending tasks last; sorted() keeps input order otherwise.
    plan.tasks = sorted(entries, key=lambda e: (not e.is_start, e.is_end))
    return plan


def project_days(goal: Goal) -> list[DayPlan]:
    """One DayPlan per calendar day from day 0 through ``ceil(total_days)``."""
    last_day = math.ceil(round(goal.total_days, 9))
    return [project_day(goal.tasks, day, goal.start_date) for day in range(last_day + 1)]
