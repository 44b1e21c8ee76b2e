import pytest

from goalplan.errors import GraphConstructionError
from goalplan.graph import TaskGraph, build_task_graph
from goalplan.models import RawTask, TaskStatus


def test_ids_and_order_follow_input():
    graph = build_task_graph([{"title": "A"}, {"title": "B"}, {"title": "C"}])
    assert [t.id for t in graph] == ["T-1", "T-2", "T-3"]
    assert [t.order_index for t in graph] == [0, 1, 2]
    assert all(t.status == TaskStatus.PENDING for t in graph)
    assert all(t.start_day == 0 and t.end_day == 0 for t in graph)


def test_out_of_range_dependencies_are_dropped():
    graph = build_task_graph([
        {"title": "A", "dependsOn": [5, -1]},
        {"title": "B", "dependsOn": [0, 0, 2, 99]},
        {"title": "C"},
    ])
    assert graph["T-1"].dependencies == ()
    assert graph["T-2"].dependencies == ("T-1", "T-3")
    assert set(graph.dag.predecessors("T-2")) == {"T-1", "T-3"}


def test_accepts_raw_task_objects():
    graph = build_task_graph([RawTask(title="A", estimated_duration_days=2), RawTask(title="B", depends_on=[0])])
    assert graph["T-2"].dependencies == ("T-1",)
    assert [t.title for t in graph.dependencies_of("T-2")] == ["A"]


def test_empty_list_is_an_error():
    with pytest.raises(GraphConstructionError):
        build_task_graph([])


def test_duplicate_ids_rejected():
    graph = build_task_graph([{"title": "A"}])
    with pytest.raises(GraphConstructionError):
        TaskGraph([graph["T-1"], graph["T-1"]])


def test_topological_order_breaks_ties_by_input_order():
    graph = build_task_graph([
        {"title": "late", "dependsOn": [2]},
        {"title": "free"},
        {"title": "root"},
    ])
    assert graph.topological_order() == ["T-2", "T-3", "T-1"]
