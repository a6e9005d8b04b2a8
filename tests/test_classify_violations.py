from __future__ import annotations

from classify.violations import classify_findings
from graph.algos import find_cycle_groups
from graph.models import DependencyGraph, Edge
from rules.engine import Finding

ROOT = "/repo"
A = f"{ROOT}/src/a.ts"
B = f"{ROOT}/src/b.ts"
UTILS = f"{ROOT}/src/utils/utils.ts"
API = f"{ROOT}/src/api/api.ts"
INDEX = f"{ROOT}/src/index.ts"


def _graph() -> DependencyGraph:
    edges = frozenset({Edge(A, B), Edge(B, A), Edge(UTILS, API), Edge(INDEX, A)})
    return DependencyGraph(
        root=ROOT,
        modules=frozenset({A, B, UTILS, API, INDEX}),
        edges=edges,
        cycles=find_cycle_groups(edges),
    )


def test_circular_finding_becomes_circular_dependency_with_cycle_partners() -> None:
    finding = Finding(
        kind="circular", rule_name="no-circular", severity="error", module=A, target=B
    )

    (violation,) = classify_findings([finding], _graph())

    assert violation.type == "circular-dependency"
    assert violation.module == A
    assert violation.severity == "error"
    assert violation.message == "Circular dependency detected"
    assert violation.related == (B,)
    assert violation.target is None


def test_forbidden_finding_becomes_layer_violation_with_target_name() -> None:
    finding = Finding(
        kind="forbidden",
        rule_name="layer-lib-standalone",
        severity="error",
        module=UTILS,
        target=API,
    )

    (violation,) = classify_findings([finding], _graph())

    assert violation.type == "layer-violation"
    assert violation.target == API
    assert violation.message == "Dependency on `api.ts` violates layer rules"
    assert violation.rule_name == "layer-lib-standalone"


def test_rule_comment_overrides_default_message() -> None:
    finding = Finding(
        kind="forbidden",
        rule_name="layer-x",
        severity="warn",
        module=UTILS,
        target=API,
        comment="Lib layer should be standalone",
    )

    (violation,) = classify_findings([finding], _graph())

    assert violation.message == "Lib layer should be standalone"
    assert violation.severity == "warn"


def test_fan_out_finding_becomes_entry_bloat() -> None:
    finding = Finding(
        kind="fan-out",
        rule_name="entry-bloat",
        severity="warn",
        module=INDEX,
        fan_out=20,
    )

    (violation,) = classify_findings([finding], _graph())

    assert violation.type == "entry-bloat"
    assert violation.message == "Entry point has 20 dependencies (consider splitting)"
    assert violation.severity == "warn"


def test_one_violation_per_module_and_type_first_finding_wins() -> None:
    findings = [
        Finding(kind="forbidden", rule_name="layer-1", severity="warn", module=UTILS, target=API),
        Finding(kind="forbidden", rule_name="layer-2", severity="error", module=UTILS, target=A),
        Finding(kind="circular", rule_name="no-circular", severity="error", module=A, target=B),
        Finding(kind="circular", rule_name="no-circular-2", severity="warn", module=A, target=B),
        Finding(kind="forbidden", rule_name="layer-3", severity="error", module=A, target=B),
    ]

    violations = classify_findings(findings, _graph())

    assert [(v.module, v.type, v.rule_name) for v in violations] == [
        (UTILS, "layer-violation", "layer-1"),
        (A, "circular-dependency", "no-circular"),
        (A, "layer-violation", "layer-3"),
    ]
