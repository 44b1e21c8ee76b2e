"""Plan generation: producer output -> task graph -> schedule -> Goal."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date

from goalplan.config import Settings
from goalplan.critical_path import CriticalPath, find_critical_path
from goalplan.errors import CyclicDependencyError, TaskNotFoundError
from goalplan.graph import TaskGraph, build_task_graph
from goalplan.models import Goal, RawTask, TaskStatus
from goalplan.producer import TaskProducer, produce_tasks
from goalplan.scheduler import ScheduleReport, schedule
from goalplan.templates import fallback_tasks, match_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanResult:
    goal: Goal
    report: ScheduleReport
    source: str


def resolve_total_days(
    total_days: float | None,
    due_date: date | None,
    start_date: date,
    default: float = 14.0,
) -> float:
    """Day budget for a plan. A due date wins over a day count."""
    if due_date is not None:
        days = (due_date - start_date).days
        if days < 1:
            logger.warning("Due date %s is not after start date %s; planning a 1-day budget", due_date, start_date)
        return float(max(1, days))
    if total_days is None:
        return float(default)
    if total_days <= 0:
        raise ValueError(f"total_days must be positive, got {total_days}")
    return float(total_days)


def build_goal(
    title: str,
    records: Sequence[RawTask | Mapping],
    total_days: float,
    start_date: date,
    due_date: date | None = None,
) -> tuple[Goal, ScheduleReport]:
    """Schedule a raw task list into a fresh Goal."""
    graph = build_task_graph(records)
    report = schedule(graph, total_days, start_date)
    goal = Goal(
        title=title,
        total_days=total_days,
        start_date=start_date,
        due_date=due_date,
        tasks=tuple(graph.tasks),
    )
    return goal, report


async def generate_plan(
    goal_text: str,
    total_days: float | None = None,
    due_date: date | None = None,
    *,
    start_date: date | None = None,
    producer: TaskProducer | None = None,
    settings: Settings | None = None,
) -> PlanResult:
    """Produce tasks for *goal_text* (AI or fallback) and schedule them."""
    settings = settings or Settings.from_env()
    start = start_date or date.today()
    days = resolve_total_days(total_days, due_date, start, settings.default_total_days)

    records, source = await produce_tasks(goal_text, days, due_date, producer=producer, settings=settings)
    try:
        goal, report = build_goal(goal_text, records, days, start, due_date)
    except CyclicDependencyError as e:
        if source.startswith("template:"):
            raise
        # cyclic AI output falls back like any other unusable reply
        logger.warning("Producer %s returned cyclic dependencies (%s); using fallback", source, " -> ".join(e.cycle))
        template_name, _ = match_template(goal_text)
        source = f"template:{template_name}"
        goal, report = build_goal(goal_text, fallback_tasks(goal_text, days), days, start, due_date)
    logger.info(
        "Planned %d tasks from %s; horizon %.2f days, scale %.3f",
        len(goal.tasks), source, report.horizon, report.scale_factor,
    )
    return PlanResult(goal=goal, report=report, source=source)


def set_status(goal: Goal, task_id: str, status: TaskStatus) -> Goal:
    """Copy of *goal* with one task's status changed; nothing else is touched."""
    if goal.task(task_id) is None:
        raise TaskNotFoundError(task_id)
    tasks = tuple(replace(t, status=status) if t.id == task_id else t for t in goal.tasks)
    return replace(goal, tasks=tasks)


def critical_path_for(goal: Goal) -> CriticalPath:
    return find_critical_path(TaskGraph(goal.tasks))
