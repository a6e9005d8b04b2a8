from __future__ import annotations

from pathlib import Path

from classify.models import Violation
from identity.resolver import IdentityMap, resolve_identities

A = "/repo/src/a.ts"
B = "/repo/src/b.ts"
C = "/repo/src/c.ts"


def _circular(module: str, related: tuple[str, ...] = ()) -> Violation:
    return Violation(
        type="circular-dependency",
        module=module,
        message="Circular dependency detected",
        severity="error",
        rule_name="no-circular",
        related=related,
    )


def test_resolves_module_target_and_related_ids() -> None:
    violations = [
        _circular(A, related=(B, C)),
        Violation(
            type="layer-violation",
            module=B,
            message="Dependency on `a.ts` violates layer rules",
            severity="error",
            rule_name="layer-x",
            target=A,
        ),
    ]

    warnings = resolve_identities(violations, {A: "id-a", B: "id-b"})

    assert [w.file_id for w in warnings] == ["id-a", "id-b"]
    assert warnings[0].related_file_ids == ("id-b",)
    assert warnings[1].target_id == "id-a"


def test_unmapped_modules_are_dropped_silently() -> None:
    warnings = resolve_identities([_circular(A), _circular(B)], {B: "id-b"})

    assert [w.file_id for w in warnings] == ["id-b"]


def test_empty_mapping_yields_no_warnings() -> None:
    assert resolve_identities([_circular(A)], {}) == []


def test_mapping_keys_are_normalized() -> None:
    warnings = resolve_identities([_circular(A)], {"/repo/src/./lib/../a.ts": "id-a"})

    assert [w.file_id for w in warnings] == ["id-a"]


def test_paths_sharing_an_id_yield_one_warning_per_type() -> None:
    id_map = IdentityMap({A: "shared", B: "shared"})

    warnings = resolve_identities([_circular(A), _circular(B)], id_map)

    assert len(warnings) == 1
    assert "shared" in [w.file_id for w in warnings]
    assert len(id_map) == 2


def test_warning_serializes_with_camel_case_keys() -> None:
    (warning,) = resolve_identities([_circular(A, related=(B,))], {A: "id-a", B: "id-b"})

    assert warning.to_dict() == {
        "type": "circular-dependency",
        "fileId": "id-a",
        "message": "Circular dependency detected",
        "severity": "error",
        "ruleName": "no-circular",
        "targetId": None,
        "relatedFileIds": ["id-b"],
    }


def test_mapping_keyed_through_symlinked_directory_resolves(tmp_path: Path) -> None:
    real = tmp_path / "real"
    (real / "src").mkdir(parents=True)
    (real / "src" / "a.ts").write_text("", encoding="utf-8")
    link = tmp_path / "link"
    link.symlink_to(real, target_is_directory=True)
    id_map = IdentityMap({str(link / "src" / "a.ts"): "id-a"})

    (warning,) = resolve_identities([_circular(str(real.resolve() / "src" / "a.ts"))], id_map)

    assert warning.file_id == "id-a"
    assert str(real / "src" / "a.ts") in id_map
