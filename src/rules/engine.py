"""Rule evaluation over a dependency graph."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from rules.patterns import matches_predicate

if TYPE_CHECKING:
    from graph.models import DependencyGraph
    from rules.config import AnalysisOptions, Rule, RuleSet, Severity

logger = logging.getLogger(__name__)

FindingKind = Literal["circular", "forbidden", "fan-out"]

ENTRY_BLOAT_RULE_NAME = "entry-bloat"


@dataclass(frozen=True)
class Finding:
    """A raw rule match, before classification into a warning."""

    kind: FindingKind
    rule_name: str
    severity: Severity
    module: str
    target: str | None = None
    comment: str | None = None
    fan_out: int | None = None


def _evaluate_rule(graph: DependencyGraph, rule: Rule) -> list[Finding]:
    findings: list[Finding] = []
    flagged: set[str] = set()
    kind: FindingKind = "circular" if rule.circular else "forbidden"

    for edge in graph.sorted_edges():
        if rule.circular:
            if edge.source in flagged or not graph.is_cyclic_edge(edge):
                continue
        source_rel = graph.relative_path(edge.source)
        if not matches_predicate(source_rel, rule.from_):
            continue
        if not matches_predicate(graph.relative_path(edge.target), rule.to):
            continue

        flagged.add(edge.source)
        findings.append(
            Finding(
                kind=kind,
                rule_name=rule.name,
                severity=rule.severity,
                module=edge.source,
                target=edge.target,
                comment=rule.comment,
            )
        )

    return findings


def find_entry_bloat(graph: DependencyGraph, options: AnalysisOptions) -> list[Finding]:
    """Flag modules whose direct dependency count exceeds the threshold.

    The boundary is exclusive: a module with exactly
    ``entry_bloat_threshold`` dependencies is not flagged.
    """
    if not options.entry_bloat_enabled:
        return []

    pattern = (
        re.compile(options.entry_bloat_pattern)
        if options.entry_bloat_pattern
        else None
    )
    findings: list[Finding] = []
    for module in sorted(graph.modules):
        count = graph.fan_out(module)
        if count <= options.entry_bloat_threshold:
            continue
        if pattern is not None and not pattern.search(graph.relative_path(module)):
            continue
        findings.append(
            Finding(
                kind="fan-out",
                rule_name=ENTRY_BLOAT_RULE_NAME,
                severity=options.entry_bloat_severity,
                module=module,
                fan_out=count,
            )
        )
    return findings


def evaluate_rules(graph: DependencyGraph, ruleset: RuleSet) -> list[Finding]:
    """Evaluate every rule of ``ruleset`` against ``graph``.

    Rules run in rule-set order, each over the edges in sorted order, and
    the structural entry-bloat check runs last. A circular rule reports
    each cycle member at most once; a path rule reports the source module
    of every matching edge.
    """
    findings: list[Finding] = []
    for rule in ruleset.rules:
        rule_findings = _evaluate_rule(graph, rule)
        logger.debug("rule %s matched %d edge(s)", rule.name, len(rule_findings))
        findings.extend(rule_findings)

    findings.extend(find_entry_bloat(graph, ruleset.options))
    return findings


__all__ = [
    "ENTRY_BLOAT_RULE_NAME",
    "Finding",
    "evaluate_rules",
    "find_entry_bloat",
]
