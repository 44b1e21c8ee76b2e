"""Task graph construction.

Tasks hold only the ids of the tasks they depend on; the graph owns the
id -> task lookup and the ``networkx`` DAG built from those ids.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import networkx as nx

from goalplan.errors import CyclicDependencyError, GraphConstructionError
from goalplan.models import RawTask, Task, TaskStatus

logger = logging.getLogger(__name__)


def task_id_for(index: int) -> str:
    return f"T-{index + 1}"


class TaskGraph:
    """An ordered set of tasks and their dependency edges."""

    def __init__(self, tasks: Iterable[Task]) -> None:
        self.tasks: list[Task] = list(tasks)
        self.by_id: dict[str, Task] = {}
        for task in self.tasks:
            if task.id in self.by_id:
                raise GraphConstructionError(f"Duplicate task id {task.id}")
            self.by_id[task.id] = task
        self._dag: nx.DiGraph | None = None

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def __getitem__(self, task_id: str) -> Task:
        return self.by_id[task_id]

    def dependencies_of(self, task_id: str) -> list[Task]:
        return [self.by_id[d] for d in self.by_id[task_id].dependencies if d in self.by_id]

    @property
    def dag(self) -> nx.DiGraph:
        """Edges point from a dependency to the task that waits on it."""
        if self._dag is None:
            G = nx.DiGraph()
            for task in self.tasks:
                G.add_node(task.id, task=task)
            for task in self.tasks:
                for dep in task.dependencies:
                    if dep in self.by_id:
                        G.add_edge(dep, task.id)
                    else:
                        logger.debug("Ignoring unknown dependency %s of %s", dep, task.id)
            self._dag = G
        return self._dag

    def topological_order(self) -> list[str]:
        """Task ids, dependencies first, ties broken by input order.

        Raises CyclicDependencyError instead of looping on a cycle.
        """
        G = self.dag
        order_of = {t.id: t.order_index for t in self.tasks}
        try:
            return list(nx.lexicographical_topological_sort(G, key=lambda tid: order_of[tid]))
        except nx.NetworkXUnfeasible:
            cycle = [u for u, _ in nx.find_cycle(G)]
            logger.error("Dependency cycle among tasks %s", ", ".join(cycle))
            raise CyclicDependencyError(cycle) from None


def build_task_graph(records: Sequence[RawTask | Mapping]) -> TaskGraph:
    """Turn a producer's raw task list into a graph of fresh, unscheduled tasks.

    ``depends_on`` indices outside ``[0, n)`` are dropped. A task listing its own
    index is kept so that scheduling reports it as a cycle.
    """
    if not records:
        raise GraphConstructionError()

    raws = [r if isinstance(r, RawTask) else RawTask.from_dict(dict(r), i) for i, r in enumerate(records)]
    n = len(raws)
    ids = [task_id_for(i) for i in range(n)]

    tasks: list[Task] = []
    for index, raw in enumerate(raws):
        deps: list[str] = []
        for dep_index in raw.depends_on:
            if not 0 <= dep_index < n:
                logger.debug("Dropping out-of-range dependency index %d on task %d", dep_index, index)
                continue
            dep_id = ids[dep_index]
            if dep_id not in deps:
                deps.append(dep_id)
        tasks.append(
            Task(
                id=ids[index],
                title=raw.title,
                description=raw.description,
                category=raw.category,
                priority=raw.priority,
                estimated_duration_days=raw.estimated_duration_days,
                start_day=0.0,
                end_day=0.0,
                status=TaskStatus.PENDING,
                dependencies=tuple(deps),
                order_index=index,
            )
        )
    return TaskGraph(tasks)
