"""Critical path analysis over a scheduled task graph."""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from goalplan.graph import TaskGraph


@dataclass(frozen=True)
class CriticalPath:
    """Tasks lying on some longest dependency chain."""

    length: float
    task_ids: tuple[str, ...]  # input order

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.task_ids

    def __len__(self) -> int:
        return len(self.task_ids)


def _close(a: float, b: float, scale: float) -> bool:
    return abs(a - b) <= 1e-9 * max(1.0, scale)


def path_lengths(graph: TaskGraph) -> dict[str, float]:
    """Longest duration-weighted chain ending at each task, the task included."""
    lengths: dict[str, float] = {}
    for tid in graph.topological_order():
        preds = graph.dag.predecessors(tid)
        lengths[tid] = graph[tid].estimated_duration_days + max((lengths[p] for p in preds), default=0.0)
    return lengths


def find_critical_path(graph: TaskGraph) -> CriticalPath:
    """Mark every task on a maximal-length chain.

    Walks backward from each task whose chain length equals the maximum,
    following every dependency whose chain length matches exactly what is
    left, so equally long alternate branches are all reported.
    """
    lengths = path_lengths(graph)
    if not lengths:
        return CriticalPath(length=0.0, task_ids=())

    critical_length = max(lengths.values())
    stack = [tid for tid, length in lengths.items() if _close(length, critical_length, critical_length)]
    marked: set[str] = set(stack)

    while stack:
        tid = stack.pop()
        remaining = lengths[tid] - graph[tid].estimated_duration_days
        for dep in graph.dag.predecessors(tid):
            if dep not in marked and _close(lengths[dep], remaining, critical_length):
                marked.add(dep)
                stack.append(dep)

    ordered = tuple(t.id for t in graph if t.id in marked)
    return CriticalPath(length=critical_length, task_ids=ordered)


def critical_chains(graph: TaskGraph, critical: CriticalPath) -> list[list[str]]:
    """Split the critical tasks into chains, each in dependency order."""
    sub = graph.dag.subgraph(critical.task_ids).copy()
    order_of = {t.id: t.order_index for t in graph}
    chains: list[list[str]] = []
    visited: set[str] = set()

    for tid in nx.lexicographical_topological_sort(sub, key=lambda t: order_of[t]):
        if tid in visited:
            continue
        chain: list[str] = []
        _trace_chain(sub, tid, visited, chain)
        chains.append(chain)
    return chains


def _trace_chain(G: nx.DiGraph, start: str, visited: set[str], chain: list[str]) -> None:
    """Walk a chain of critical tasks depth-first, collecting in topological order."""
    visited.add(start)
    chain.append(start)
    for succ in G.successors(start):
        if succ not in visited:
            _trace_chain(G, succ, visited, chain)
