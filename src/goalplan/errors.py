"""Planning errors.

Every error derives from ``ValueError`` so callers can handle a bad plan
the same way they handle any other bad input.
"""

from __future__ import annotations


class PlanError(ValueError):
    """Base class for plan construction and scheduling failures."""


class GraphConstructionError(PlanError):
    def __init__(self, message: str = "Cannot build a plan from an empty task list") -> None:
        super().__init__(message)


class CyclicDependencyError(PlanError):
    """Dependency resolution found a cycle; ``cycle`` lists the task ids involved."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Circular dependency detected: {path}")


class TaskNotFoundError(PlanError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class ProducerError(PlanError):
    """The external task producer failed or returned something unusable."""
