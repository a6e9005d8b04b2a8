from __future__ import annotations

from graph.algos import find_cycle_groups
from graph.models import DependencyGraph, Edge
from rules.config import AnalysisOptions, Rule, RuleSet
from rules.engine import evaluate_rules, find_entry_bloat

ROOT = "/repo"


def _path(rel: str) -> str:
    return f"{ROOT}/{rel}"


def _graph(edges: list[tuple[str, str]]) -> DependencyGraph:
    edge_set = frozenset(Edge(_path(s), _path(t)) for s, t in edges)
    modules = frozenset(path for edge in edge_set for path in edge)
    return DependencyGraph(
        root=ROOT,
        modules=modules,
        edges=edge_set,
        cycles=find_cycle_groups(edge_set),
    )


def _ruleset(rules: list[dict[str, object]], **options: object) -> RuleSet:
    return RuleSet(
        rules=tuple(Rule.model_validate(rule) for rule in rules),
        options=AnalysisOptions.model_validate(options),
    )


NO_CIRCULAR = {"name": "no-circular", "to": {"circular": True}}
UTILS_TO_API = {"name": "layer-utils-api", "from": "utils/", "to": "api/"}


def _fan_out_edges(source: str, count: int) -> list[tuple[str, str]]:
    return [(source, f"src/m{i:02d}.ts") for i in range(count)]


def test_circular_rule_flags_each_member_once_in_overlapping_cycles() -> None:
    graph = _graph(
        [
            ("src/a.ts", "src/b.ts"),
            ("src/b.ts", "src/a.ts"),
            ("src/b.ts", "src/c.ts"),
            ("src/c.ts", "src/b.ts"),
            ("src/a.ts", "src/c.ts"),
        ]
    )

    findings = evaluate_rules(graph, _ruleset([NO_CIRCULAR]))

    assert sorted(f.module for f in findings) == [
        _path("src/a.ts"),
        _path("src/b.ts"),
        _path("src/c.ts"),
    ]
    assert {f.kind for f in findings} == {"circular"}


def test_circular_rule_ignores_edges_between_distinct_cycles() -> None:
    graph = _graph(
        [
            ("src/a.ts", "src/b.ts"),
            ("src/b.ts", "src/a.ts"),
            ("src/x.ts", "src/y.ts"),
            ("src/y.ts", "src/x.ts"),
            ("src/a.ts", "src/x.ts"),
            ("src/index.ts", "src/a.ts"),
        ]
    )

    findings = evaluate_rules(graph, _ruleset([NO_CIRCULAR]))

    assert _path("src/index.ts") not in {f.module for f in findings}
    assert len(findings) == 4


def test_circular_rule_flags_self_edge() -> None:
    graph = _graph([("src/self.ts", "src/self.ts")])

    findings = evaluate_rules(graph, _ruleset([NO_CIRCULAR]))

    assert [f.module for f in findings] == [_path("src/self.ts")]


def test_circular_rule_respects_from_predicate() -> None:
    graph = _graph(
        [
            ("src/core/a.ts", "src/ui/b.ts"),
            ("src/ui/b.ts", "src/core/a.ts"),
        ]
    )
    rule = {"name": "no-circular-core", "from": "core/", "to": {"circular": True}}

    findings = evaluate_rules(graph, _ruleset([rule]))

    assert [f.module for f in findings] == [_path("src/core/a.ts")]


def test_path_rule_flags_source_module() -> None:
    graph = _graph(
        [
            ("src/utils/utils.ts", "src/api/api.ts"),
            ("src/api/api.ts", "src/utils/utils.ts"),
        ]
    )

    findings = evaluate_rules(graph, _ruleset([UTILS_TO_API]))

    assert len(findings) == 1
    assert findings[0].kind == "forbidden"
    assert findings[0].module == _path("src/utils/utils.ts")
    assert findings[0].target == _path("src/api/api.ts")
    assert findings[0].rule_name == "layer-utils-api"


def test_path_rule_reports_every_matching_edge() -> None:
    graph = _graph(
        [
            ("src/utils/utils.ts", "src/api/api.ts"),
            ("src/utils/utils.ts", "src/api/client.ts"),
        ]
    )

    findings = evaluate_rules(graph, _ruleset([UTILS_TO_API]))

    assert [f.target for f in findings] == [
        _path("src/api/api.ts"),
        _path("src/api/client.ts"),
    ]


def test_entry_bloat_boundary_is_exclusive() -> None:
    graph = _graph(
        _fan_out_edges("src/index.ts", 15) + _fan_out_edges("src/main.ts", 16)
    )

    findings = find_entry_bloat(graph, AnalysisOptions())

    assert [(f.module, f.fan_out) for f in findings] == [(_path("src/main.ts"), 16)]
    assert findings[0].severity == "warn"
    assert findings[0].kind == "fan-out"


def test_entry_bloat_runs_without_any_rules() -> None:
    graph = _graph(_fan_out_edges("src/index.ts", 20))

    findings = evaluate_rules(graph, _ruleset([], entry_bloat_threshold=19))

    assert [f.module for f in findings] == [_path("src/index.ts")]


def test_entry_bloat_can_be_disabled_explicitly() -> None:
    graph = _graph(_fan_out_edges("src/index.ts", 20))

    findings = evaluate_rules(graph, _ruleset([], entry_bloat_enabled=False))

    assert findings == []


def test_entry_bloat_pattern_limits_to_entry_modules() -> None:
    graph = _graph(
        _fan_out_edges("src/index.ts", 20) + _fan_out_edges("src/registry.ts", 20)
    )
    options = AnalysisOptions(entry_bloat_pattern="(^|/)(index|main|App)\\.")

    findings = find_entry_bloat(graph, options)

    assert [f.module for f in findings] == [_path("src/index.ts")]


def test_findings_follow_rule_order_then_entry_bloat() -> None:
    graph = _graph(
        [
            ("src/utils/utils.ts", "src/api/api.ts"),
            ("src/a.ts", "src/b.ts"),
            ("src/b.ts", "src/a.ts"),
        ]
        + _fan_out_edges("src/index.ts", 3)
    )

    findings = evaluate_rules(
        graph, _ruleset([UTILS_TO_API, NO_CIRCULAR], entry_bloat_threshold=2)
    )

    assert [f.rule_name for f in findings] == [
        "layer-utils-api",
        "no-circular",
        "no-circular",
        "entry-bloat",
    ]
