"""Parsing of dependency-cruiser JSON output into a dependency graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import MalformedOutputError
from graph.algos import find_cycle_groups
from graph.models import DependencyGraph, Edge
from utils import normalize_path

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200


class CruiseDependency(BaseModel):
    """One outgoing dependency of a module as reported by the tool."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    resolved: str
    circular: bool | None = None
    core_module: bool = Field(default=False, alias="coreModule")
    could_not_resolve: bool = Field(default=False, alias="couldNotResolve")


class CruiseModule(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source: str
    dependencies: list[CruiseDependency] = Field(default_factory=list)
    core_module: bool = Field(default=False, alias="coreModule")
    could_not_resolve: bool = Field(default=False, alias="couldNotResolve")

    @field_validator("dependencies", mode="before")
    @classmethod
    def validate_dependencies(cls, v: Any) -> Any:
        """Accept bare resolved paths as dependencies."""
        if isinstance(v, list):
            return [{"resolved": dep} if isinstance(dep, str) else dep for dep in v]
        return v

    @property
    def is_project_file(self) -> bool:
        return not (self.core_module or self.could_not_resolve)


class CruiseResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    modules: list[CruiseModule]
    summary: dict[str, Any] = Field(default_factory=dict)


def _snippet(text: str) -> str:
    return text[:SNIPPET_LENGTH]


def load_cruise_result(raw: bytes | str) -> CruiseResult:
    """Decode and validate a cruise result document.

    Accepts both the CLI layout (``{"modules": ..., "summary": ...}``) and
    the API layout wrapped in ``{"output": ...}``.

    Raises:
        MalformedOutputError: If ``raw`` is not JSON or not a cruise result.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if not text.strip():
        raise MalformedOutputError("empty output")

    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise MalformedOutputError(f"invalid JSON: {exc}", _snippet(text)) from exc

    if not isinstance(data, dict):
        raise MalformedOutputError("top-level value is not an object", _snippet(text))

    if data.get("outputType") == "err":
        raise MalformedOutputError("tool reported an error result", _snippet(text))

    payload = data.get("output", data)
    if not isinstance(payload, dict):
        raise MalformedOutputError("output is not an object", _snippet(text))

    try:
        return CruiseResult.model_validate(payload)
    except ValidationError as exc:
        raise MalformedOutputError(f"unexpected structure: {exc}", _snippet(text)) from exc


def build_graph(
    result: CruiseResult,
    *,
    base_dir: str | Path,
    root: str | Path,
    trust_tool_cycles: bool = True,
) -> DependencyGraph:
    """Build a dependency graph from a validated cruise result.

    Paths are resolved against ``base_dir`` (the tool's working directory).
    Core modules and unresolvable dependencies are not project files and
    are left out. When the tool annotated every dependency with its
    ``circular`` flag and ``trust_tool_cycles`` is set, cycle groups come
    from the annotated edges; otherwise they are computed from all edges.
    """
    modules: set[str] = set()
    edges: set[Edge] = set()
    cyclic: set[Edge] = set()
    annotated = True

    for module in result.modules:
        if not module.is_project_file:
            continue
        source = normalize_path(module.source, base_dir)
        modules.add(source)
        for dep in module.dependencies:
            if dep.core_module or dep.could_not_resolve:
                continue
            edge = Edge(source, normalize_path(dep.resolved, base_dir))
            edges.add(edge)
            if dep.circular is None:
                annotated = False
            elif dep.circular:
                cyclic.add(edge)

    for edge in edges:
        modules.add(edge.target)

    if trust_tool_cycles and annotated and edges:
        logger.debug("using tool cycle annotations (%d cyclic edges)", len(cyclic))
        cycles = find_cycle_groups(cyclic)
    else:
        cycles = find_cycle_groups(edges)

    return DependencyGraph(
        root=normalize_path(root),
        modules=frozenset(modules),
        edges=frozenset(edges),
        cycles=cycles,
    )


def parse_cruise_output(
    raw: bytes | str,
    *,
    base_dir: str | Path,
    root: str | Path,
    trust_tool_cycles: bool = True,
) -> DependencyGraph:
    """Parse raw tool output into a dependency graph."""
    result = load_cruise_result(raw)
    return build_graph(
        result,
        base_dir=base_dir,
        root=root,
        trust_tool_cycles=trust_tool_cycles,
    )


__all__ = [
    "CruiseDependency",
    "CruiseModule",
    "CruiseResult",
    "build_graph",
    "load_cruise_result",
    "parse_cruise_output",
]
