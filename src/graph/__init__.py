"""Dependency graph model and algorithms."""

from graph.algos import build_adjacency, find_cycle_groups, find_cycles
from graph.models import DependencyGraph, Edge

__all__ = [
    "DependencyGraph",
    "Edge",
    "build_adjacency",
    "find_cycle_groups",
    "find_cycles",
]
