"""Rule definitions and evaluation."""

from rules.config import (
    DEFAULT_ENTRY_BLOAT_THRESHOLD,
    DEFAULT_RULES,
    AnalysisOptions,
    PathPredicate,
    Rule,
    RuleConfig,
    RuleSet,
    build_ruleset,
    load_rule_config,
    merge_rules,
)
from rules.engine import Finding, evaluate_rules, find_entry_bloat
from rules.patterns import matches_predicate

__all__ = [
    "DEFAULT_ENTRY_BLOAT_THRESHOLD",
    "DEFAULT_RULES",
    "AnalysisOptions",
    "Finding",
    "PathPredicate",
    "Rule",
    "RuleConfig",
    "RuleSet",
    "build_ruleset",
    "evaluate_rules",
    "find_entry_bloat",
    "load_rule_config",
    "matches_predicate",
    "merge_rules",
]
