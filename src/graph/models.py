"""Dependency graph value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import NamedTuple

from utils import relative_posix


class Edge(NamedTuple):
    """A directed dependency: ``source`` imports ``target``."""

    source: str
    target: str


@dataclass(frozen=True)
class DependencyGraph:
    """Modules, edges and cycle groups extracted for one analysis run.

    Paths are normalized absolute POSIX paths (see ``utils.normalize_path``).
    ``cycles`` holds the strongly connected groups that form cycles: groups
    with more than one module, or a single module with a self-edge.
    """

    root: str
    modules: frozenset[str]
    edges: frozenset[Edge]
    cycles: tuple[frozenset[str], ...] = field(default_factory=tuple)

    @cached_property
    def _successors(self) -> dict[str, frozenset[str]]:
        adjacency: dict[str, set[str]] = {}
        for source, target in self.edges:
            adjacency.setdefault(source, set()).add(target)
        return {node: frozenset(targets) for node, targets in adjacency.items()}

    @cached_property
    def _group_index(self) -> dict[str, int]:
        return {
            member: index
            for index, group in enumerate(self.cycles)
            for member in group
        }

    @property
    def cycle_members(self) -> frozenset[str]:
        return frozenset(self._group_index)

    def successors(self, path: str) -> frozenset[str]:
        return self._successors.get(path, frozenset())

    def fan_out(self, path: str) -> int:
        """Number of distinct modules ``path`` depends on directly."""
        return len(self.successors(path))

    def cycle_of(self, path: str) -> frozenset[str]:
        index = self._group_index.get(path)
        if index is None:
            return frozenset()
        return self.cycles[index]

    def is_cyclic_edge(self, edge: Edge) -> bool:
        """Return True when ``edge`` lies on at least one cycle."""
        source_group = self._group_index.get(edge.source)
        if source_group is None:
            return False
        return source_group == self._group_index.get(edge.target)

    def relative_path(self, path: str) -> str:
        return relative_posix(path, self.root)

    def sorted_edges(self) -> list[Edge]:
        return sorted(self.edges)


__all__ = ["DependencyGraph", "Edge"]
