"""Task and goal models, plus the enums they are described by."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime


DEFAULT_DURATION_DAYS = 1.0


class TaskCategory(enum.StrEnum):
    PLANNING = "Planning"
    DESIGN = "Design"
    DEVELOPMENT = "Development"
    TESTING = "Testing"
    DEPLOYMENT = "Deployment"


class TaskPriority(enum.StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(enum.StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _coerce_enum(enum_cls, value, default):
    """Match *value* against an enum by value or name, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        needle = value.strip().lower()
        for member in enum_cls:
            if needle in (member.value.lower(), member.name.lower()):
                return member
    return default


def _coerce_duration(value) -> float:
    if isinstance(value, bool):
        return DEFAULT_DURATION_DAYS
    try:
        days = float(value)
    except (TypeError, ValueError):
        return DEFAULT_DURATION_DAYS
    if days != days or days in (float("inf"), float("-inf")):
        return DEFAULT_DURATION_DAYS
    return max(days, 0.0)


def _coerce_indices(value) -> list[int]:
    if not isinstance(value, (list, tuple)):
        return []
    indices: list[int] = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            indices.append(item)
        elif isinstance(item, float) and item.is_integer():
            indices.append(int(item))
        elif isinstance(item, str) and item.strip().lstrip("-").isdigit():
            indices.append(int(item))
    return indices


@dataclass
class RawTask:
    """An unscheduled task record as handed over by a task producer.

    Dependencies are indices into the producer's list, not ids.
    """

    title: str
    description: str = ""
    category: TaskCategory = TaskCategory.DEVELOPMENT
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_duration_days: float = DEFAULT_DURATION_DAYS
    depends_on: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "estimatedDurationDays": self.estimated_duration_days,
            "dependsOn": list(self.depends_on),
        }

    @classmethod
    def from_dict(cls, d: dict, index: int = 0) -> RawTask:
        """Build from an untrusted record. Missing or malformed fields are defaulted."""
        title = d.get("title")
        if not isinstance(title, str) or not title.strip():
            title = f"Task {index + 1}"
        description = d.get("description")
        if not isinstance(description, str):
            description = ""
        duration = d.get("estimatedDurationDays", d.get("estimated_duration_days"))
        depends = d.get("dependsOn", d.get("depends_on"))
        return cls(
            title=title.strip(),
            description=description,
            category=_coerce_enum(TaskCategory, d.get("category"), TaskCategory.DEVELOPMENT),
            priority=_coerce_enum(TaskPriority, d.get("priority"), TaskPriority.MEDIUM),
            estimated_duration_days=_coerce_duration(duration),
            depends_on=_coerce_indices(depends),
        )


@dataclass
class Task:
    """A single task in a plan.

    ``start_day``/``end_day`` are fractional day offsets from the plan's day 0
    and are written only by the scheduler. ``status`` is the only field that
    changes after scheduling.
    """

    id: str
    title: str
    description: str = ""
    category: TaskCategory = TaskCategory.DEVELOPMENT
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_duration_days: float = DEFAULT_DURATION_DAYS
    start_day: float = 0.0
    end_day: float = 0.0
    start_date: date | None = None
    end_date: date | None = None
    status: TaskStatus = TaskStatus.PENDING
    dependencies: tuple[str, ...] = ()
    order_index: int = 0

    @property
    def duration(self) -> float:
        return self.end_day - self.start_day

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "estimatedDurationDays": self.estimated_duration_days,
            "startDay": self.start_day,
            "endDay": self.end_day,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "status": self.status.value,
            "dependencies": list(self.dependencies),
            "orderIndex": self.order_index,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        start_date = d.get("startDate")
        end_date = d.get("endDate")
        return cls(
            id=d["id"],
            title=d["title"],
            description=d.get("description", ""),
            category=TaskCategory(d.get("category", TaskCategory.DEVELOPMENT.value)),
            priority=TaskPriority(d.get("priority", TaskPriority.MEDIUM.value)),
            estimated_duration_days=float(d["estimatedDurationDays"]),
            start_day=float(d.get("startDay", 0.0)),
            end_day=float(d.get("endDay", 0.0)),
            start_date=date.fromisoformat(start_date) if start_date else None,
            end_date=date.fromisoformat(end_date) if end_date else None,
            status=TaskStatus(d.get("status", TaskStatus.PENDING.value)),
            dependencies=tuple(d.get("dependencies", [])),
            order_index=int(d.get("orderIndex", 0)),
        )


@dataclass(frozen=True)
class Goal:
    """A scheduled plan: the aggregate root owning the ordered task list.

    Goals are replaced rather than patched; use :func:`goalplan.planner.set_status`
    to get a copy with one task's status changed.
    """

    title: str
    total_days: float
    start_date: date
    tasks: tuple[Task, ...]
    due_date: date | None = None
    status: TaskStatus = TaskStatus.PENDING
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)

    def task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    @property
    def horizon(self) -> float:
        return max((t.end_day for t in self.tasks), default=0.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "totalDays": self.total_days,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "startDate": self.start_date.isoformat(),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Goal:
        due = d.get("dueDate")
        return cls(
            id=d["id"],
            title=d["title"],
            total_days=float(d["totalDays"]),
            due_date=date.fromisoformat(due) if due else None,
            start_date=date.fromisoformat(d["startDate"]),
            status=TaskStatus(d.get("status", TaskStatus.PENDING.value)),
            created_at=datetime.fromisoformat(d["createdAt"]),
            tasks=tuple(Task.from_dict(t) for t in d.get("tasks", [])),
        )
