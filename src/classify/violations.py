"""Conversion of raw rule findings into typed violations."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from classify.models import Violation, WarningType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graph.models import DependencyGraph
    from rules.engine import Finding, FindingKind

_TYPE_BY_KIND: dict[FindingKind, WarningType] = {
    "circular": "circular-dependency",
    "forbidden": "layer-violation",
    "fan-out": "entry-bloat",
}


def _default_message(finding: Finding, warning_type: WarningType) -> str:
    if warning_type == "circular-dependency":
        return "Circular dependency detected"
    if warning_type == "entry-bloat":
        return (
            f"Entry point has {finding.fan_out} dependencies (consider splitting)"
        )
    if finding.target is not None:
        target_name = PurePosixPath(finding.target).name
        return f"Dependency on `{target_name}` violates layer rules"
    return finding.rule_name


def classify_finding(finding: Finding, graph: DependencyGraph) -> Violation:
    warning_type = _TYPE_BY_KIND[finding.kind]
    related: tuple[str, ...] = ()
    target = finding.target
    if warning_type == "circular-dependency":
        related = tuple(sorted(graph.cycle_of(finding.module) - {finding.module}))
        target = None
    return Violation(
        type=warning_type,
        module=finding.module,
        message=finding.comment or _default_message(finding, warning_type),
        severity=finding.severity,
        rule_name=finding.rule_name,
        target=target,
        related=related,
    )


def classify_findings(
    findings: Iterable[Finding], graph: DependencyGraph
) -> list[Violation]:
    """Map findings to violations, one per module and warning type.

    The first finding for a ``(module, type)`` pair wins; later findings of
    the same type for that module are discarded, whichever rule produced
    them. Output keeps the order of the surviving findings.
    """
    seen: set[tuple[str, WarningType]] = set()
    violations: list[Violation] = []
    for finding in findings:
        key = (finding.module, _TYPE_BY_KIND[finding.kind])
        if key in seen:
            continue
        seen.add(key)
        violations.append(classify_finding(finding, graph))
    return violations


__all__ = ["classify_finding", "classify_findings"]
