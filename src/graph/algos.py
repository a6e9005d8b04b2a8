"""Graph algorithms for dependency analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graph.models import Edge


def build_adjacency(
    edges: Iterable[Edge], nodes: Iterable[str] = ()
) -> dict[str, set[str]]:
    """Build an adjacency mapping from edges.

    Args:
        edges: Directed ``(source, target)`` pairs
        nodes: Extra nodes to include even when they have no edges

    Returns:
        Dictionary where keys are nodes and values are the sets of nodes
        they depend on. Every edge endpoint appears as a key.
    """
    graph: dict[str, set[str]] = {node: set() for node in nodes}

    for source, target in edges:
        graph.setdefault(source, set()).add(target)
        graph.setdefault(target, set())

    return graph


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _strongconnect(node: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Process a node in Tarjan's algorithm.

    Iterative over an explicit work stack: import chains in large projects
    can be deeper than the interpreter's recursion limit.
    """
    work: list[tuple[str, list[str]]] = []

    def _visit(current: str) -> None:
        state.indices[current] = state.index
        state.low_link[current] = state.index
        state.index += 1
        state.stack.append(current)
        state.on_stack.add(current)
        work.append((current, sorted(graph.get(current, set()), reverse=True)))

    _visit(node)
    while work:
        current, pending = work[-1]
        if pending:
            neighbor = pending.pop()
            if neighbor not in state.indices:
                _visit(neighbor)
            elif neighbor in state.on_stack:
                state.low_link[current] = min(
                    state.low_link[current], state.indices[neighbor]
                )
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[current])

        if state.low_link[current] == state.indices[current]:
            scc = _extract_scc(state, current)
            if len(scc) > 1 or current in graph.get(current, set()):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Dictionary representing the graph

    Returns:
        List of cycles, where each cycle is a strongly connected component
        with more than one node or a single node with a self-edge
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


def find_cycle_groups(edges: Iterable[Edge]) -> tuple[frozenset[str], ...]:
    """Return the cycle groups of an edge set in a deterministic order."""
    cycles = find_cycles(build_adjacency(edges))
    groups = [frozenset(cycle) for cycle in cycles]
    groups.sort(key=lambda group: sorted(group))
    return tuple(groups)


__all__ = [
    "_TarjanState",
    "_extract_scc",
    "_strongconnect",
    "build_adjacency",
    "find_cycle_groups",
    "find_cycles",
]
