"""Architecture analysis entry points."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from classify.violations import classify_findings
from extract.runner import extract_graph
from identity.resolver import IdentityMap, resolve_identities
from project.descriptor import load_descriptor
from rules.engine import evaluate_rules

if TYPE_CHECKING:
    from collections.abc import Mapping

    from classify.models import ArchitectureWarning
    from extract.runner import ExtractorSettings
    from graph.models import DependencyGraph
    from project.descriptor import ProjectDescriptor
    from rules.config import RuleSet

logger = logging.getLogger(__name__)


def relative_path_ids(graph: DependencyGraph) -> dict[str, str]:
    """Identify every module of ``graph`` by its root-relative path."""
    return {module: graph.relative_path(module) for module in graph.modules}


def analyze_graph(
    graph: DependencyGraph,
    ruleset: RuleSet,
    file_ids: Mapping[str, str] | IdentityMap,
) -> list[ArchitectureWarning]:
    """Evaluate rules on an extracted graph and return resolved warnings."""
    findings = evaluate_rules(graph, ruleset)
    violations = classify_findings(findings, graph)
    warnings = resolve_identities(violations, file_ids)
    logger.debug(
        "%d finding(s), %d violation(s), %d warning(s)",
        len(findings),
        len(violations),
        len(warnings),
    )
    return warnings


async def analyze(
    root: str | Path,
    file_ids: Mapping[str, str] | None,
    *,
    timeout: float | None = None,
    descriptor: ProjectDescriptor | None = None,
    settings: ExtractorSettings | None = None,
) -> list[ArchitectureWarning]:
    """Analyze the project at ``root`` and return its architecture warnings.

    Args:
        root: Project root directory
        file_ids: Absolute path -> stable identifier. Modules missing from the
            mapping produce no warnings. ``None`` identifies every module by
            its root-relative path.
        timeout: Seconds the analysis tool may run (default from options)
        descriptor: A previously loaded descriptor for ``root`` to reuse
        settings: Optional analysis tool launch overrides

    Returns:
        The complete, ordered warning list (possibly empty).

    Raises:
        ConfigError: No valid project or rule configuration at ``root``.
        AnalysisUnavailableError: The external analysis failed for this run.
    """
    root_path = Path(root).expanduser().resolve()
    if descriptor is None:
        descriptor = load_descriptor(root_path)

    graph = await extract_graph(
        root_path, descriptor, timeout, settings=settings
    )
    ids = relative_path_ids(graph) if file_ids is None else IdentityMap(file_ids)
    return analyze_graph(graph, descriptor.ruleset, ids)


def analyze_sync(
    root: str | Path,
    file_ids: Mapping[str, str] | None,
    *,
    timeout: float | None = None,
    descriptor: ProjectDescriptor | None = None,
    settings: ExtractorSettings | None = None,
) -> list[ArchitectureWarning]:
    """Blocking variant of ``analyze`` for callers without an event loop."""
    return asyncio.run(
        analyze(
            root,
            file_ids,
            timeout=timeout,
            descriptor=descriptor,
            settings=settings,
        )
    )


__all__ = ["analyze", "analyze_graph", "analyze_sync", "relative_path_ids"]
