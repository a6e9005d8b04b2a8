from __future__ import annotations

from graph.algos import build_adjacency, find_cycle_groups, find_cycles
from graph.models import Edge


def test_build_adjacency_includes_every_endpoint_and_extra_nodes() -> None:
    graph = build_adjacency([Edge("a", "b"), Edge("a", "c")], nodes=["lonely"])

    assert graph == {"a": {"b", "c"}, "b": set(), "c": set(), "lonely": set()}


def test_find_cycles_ignores_acyclic_graph() -> None:
    graph = {"a": {"b"}, "b": {"c"}, "c": set()}

    assert find_cycles(graph) == []


def test_find_cycles_reports_two_cycle_once() -> None:
    graph = {"a": {"b"}, "b": {"a"}}

    cycles = find_cycles(graph)

    assert len(cycles) == 1
    assert sorted(cycles[0]) == ["a", "b"]


def test_find_cycles_reports_self_edge_as_cycle() -> None:
    graph = {"a": {"a"}, "b": {"a"}}

    assert find_cycles(graph) == [["a"]]


def test_find_cycles_merges_overlapping_cycles_into_one_component() -> None:
    # a -> b -> a and b -> c -> b share b
    graph = {"a": {"b"}, "b": {"a", "c"}, "c": {"b"}, "d": {"a"}}

    cycles = find_cycles(graph)

    assert [sorted(cycle) for cycle in cycles] == [["a", "b", "c"]]


def test_find_cycles_handles_import_chains_deeper_than_recursion_limit() -> None:
    depth = 5000
    graph = {f"m{i}": {f"m{i + 1}"} for i in range(depth)}
    graph[f"m{depth}"] = {"m0"}

    cycles = find_cycles(graph)

    assert len(cycles) == 1
    assert len(cycles[0]) == depth + 1


def test_find_cycle_groups_is_sorted_and_separates_disjoint_cycles() -> None:
    edges = [
        Edge("z", "y"),
        Edge("y", "z"),
        Edge("b", "a"),
        Edge("a", "b"),
        Edge("a", "z"),
    ]

    groups = find_cycle_groups(edges)

    assert groups == (frozenset({"a", "b"}), frozenset({"y", "z"}))
