"""Dependency-driven timeline scheduling, fitted to a day budget."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta

from goalplan.graph import TaskGraph

logger = logging.getLogger(__name__)

# Day offsets are fractional; float noise below this is not a real day boundary.
EPSILON = 1e-9


@dataclass(frozen=True)
class ScheduleReport:
    """Summary of one scheduling run."""

    horizon: float
    total_days: float
    scale_factor: float

    @property
    def rescaled(self) -> bool:
        return self.scale_factor != 1.0


def start_day_index(start_day: float) -> int:
    """Calendar day (offset from day 0) on which a task starts."""
    return math.floor(round(start_day, 9))


def end_day_index(end_day: float) -> int:
    """Calendar day (offset from day 0) on which a task ends."""
    return math.ceil(round(end_day, 9))


# ---------------------------------------------------------------------------
# Forward pass
# ---------------------------------------------------------------------------


def compute_day_offsets(graph: TaskGraph) -> float:
    """Earliest start/finish for every task. Returns the unscaled horizon.

    Walks tasks in topological order so each task's dependencies are resolved
    before it; a cycle raises CyclicDependencyError.
    """
    end: dict[str, float] = {}
    for tid in graph.topological_order():
        task = graph[tid]
        preds = graph.dag.predecessors(tid)
        task.start_day = max((end[p] for p in preds), default=0.0)
        task.end_day = task.start_day + task.estimated_duration_days
        end[tid] = task.end_day
    return max(end.values(), default=0.0)


# ---------------------------------------------------------------------------
# Horizon fitting
# ---------------------------------------------------------------------------


def fit_to_horizon(graph: TaskGraph, total_days: float) -> float:
    """Compress the schedule so it ends by *total_days*. Returns the scale factor.

    A schedule that already fits is left untouched (factor 1.0).
    """
    if total_days <= 0:
        raise ValueError(f"total_days must be positive, got {total_days}")

    horizon = max((t.end_day for t in graph), default=0.0)
    if horizon <= total_days + EPSILON:
        return 1.0

    scale = total_days / horizon
    logger.debug("Horizon %.3f exceeds %.3f days; scaling by %.4f", horizon, total_days, scale)
    for task in graph:
        task.start_day *= scale
        task.end_day *= scale
        task.estimated_duration_days = task.end_day - task.start_day
    return scale


def assign_dates(graph: TaskGraph, start_date: date) -> None:
    """Whole-day calendar dates for display; offsets stay fractional."""
    for task in graph:
        task.start_date = start_date + timedelta(days=start_day_index(task.start_day))
        task.end_date = start_date + timedelta(days=end_day_index(task.end_day))


def schedule(graph: TaskGraph, total_days: float, start_date: date) -> ScheduleReport:
    """Forward pass, horizon fit and date assignment, in that order."""
    horizon = compute_day_offsets(graph)
    scale = fit_to_horizon(graph, total_days)
    assign_dates(graph, start_date)
    return ScheduleReport(horizon=horizon, total_days=total_days, scale_factor=scale)
