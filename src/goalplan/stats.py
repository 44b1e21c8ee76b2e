"""Plan statistics for the overview panel."""

from __future__ import annotations

from dataclasses import dataclass, field

from goalplan.models import Goal, TaskPriority, TaskStatus


@dataclass(frozen=True)
class PlanStats:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    progress_pct: float
    avg_duration_days: float
    schedule_length_days: float
    critical_task_count: int
    by_priority: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "in_progress_tasks": self.in_progress_tasks,
            "pending_tasks": self.pending_tasks,
            "progress_pct": round(self.progress_pct, 1),
            "avg_duration_days": round(self.avg_duration_days, 2),
            "schedule_length_days": round(self.schedule_length_days, 2),
            "critical_task_count": self.critical_task_count,
            "by_priority": self.by_priority,
            "by_category": self.by_category,
        }


def compute_stats(goal: Goal, critical_task_count: int = 0) -> PlanStats:
    tasks = goal.tasks
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)

    by_category: dict[str, int] = {}
    for t in tasks:
        by_category[t.category.value] = by_category.get(t.category.value, 0) + 1

    return PlanStats(
        total_tasks=total,
        completed_tasks=completed,
        in_progress_tasks=in_progress,
        pending_tasks=total - completed - in_progress,
        progress_pct=(completed / total * 100) if total else 0.0,
        avg_duration_days=(sum(t.estimated_duration_days for t in tasks) / total) if total else 0.0,
        schedule_length_days=goal.horizon,
        critical_task_count=critical_task_count,
        by_priority={p.value: sum(1 for t in tasks if t.priority == p) for p in TaskPriority},
        by_category=by_category,
    )
