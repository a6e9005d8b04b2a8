"""Project descriptor loading.

Collects what the external analysis needs to run against a project: the
manifest that establishes the project, the module resolution config
(tsconfig), the analysis tool's own config, and the archmap rule set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import orjson

from errors import ConfigNotFoundError
from rules.config import CONFIG_FILENAME, RuleSet, build_ruleset, load_rule_config

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
TOOL_CONFIG_FILENAMES = (
    ".dependency-cruiser.cjs",
    ".dependency-cruiser.js",
    ".dependency-cruiser.mjs",
    ".dependency-cruiser.json",
)
TOOL_CONFIG_SEARCH_DEPTH = 5


@dataclass(frozen=True)
class ProjectDescriptor:
    """Immutable description of a project to analyze.

    Callers may cache a descriptor and pass it back to ``analyze`` to skip
    reloading configuration.
    """

    root: Path
    manifest_path: Path
    base_dir: Path
    scan_target: str
    ruleset: RuleSet
    project_name: str | None = None
    project_version: str | None = None
    ts_config_path: Path | None = None
    tool_config_path: Path | None = None
    rule_config_path: Path | None = None


def _read_manifest(root: Path) -> tuple[Path, dict[str, object]]:
    manifest_path = root / MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise ConfigNotFoundError(str(root), f"{MANIFEST_FILENAME} is missing")

    try:
        data = orjson.loads(manifest_path.read_bytes())
    except OSError as exc:
        raise ConfigNotFoundError(str(root), f"cannot read {MANIFEST_FILENAME}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigNotFoundError(str(root), f"invalid {MANIFEST_FILENAME}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigNotFoundError(str(root), f"{MANIFEST_FILENAME} is not an object")
    return manifest_path, data


def find_tool_config(root: Path, depth: int = TOOL_CONFIG_SEARCH_DEPTH) -> Path | None:
    """Search ``root`` and up to ``depth - 1`` parents for a tool config."""
    search_dir = root
    for _ in range(depth):
        for filename in TOOL_CONFIG_FILENAMES:
            candidate = search_dir / filename
            if candidate.is_file():
                return candidate
        if search_dir.parent == search_dir:
            break
        search_dir = search_dir.parent
    return None


def find_ts_config(root: Path) -> tuple[Path | None, Path, str]:
    """Locate tsconfig.json and derive the analysis base dir and scan target.

    Prefers locations that hold both a tsconfig and a ``src`` directory; a
    root tsconfig without ``src`` scans the whole root. Without a tsconfig
    the base dir is the root and the scan target is ``src`` when present,
    else the whole root.
    """
    src_dir = root / "src"
    candidates = (root / "tsconfig.json", src_dir / "tsconfig.json")
    for candidate in candidates:
        if candidate.is_file() and src_dir.is_dir():
            base_dir = candidate.parent
            return candidate, base_dir, src_dir.relative_to(base_dir).as_posix()

    if candidates[0].is_file():
        return candidates[0], root, "."

    scan_target = "src" if src_dir.is_dir() else "."
    return None, root, scan_target


def load_descriptor(root: str | Path) -> ProjectDescriptor:
    """Load the descriptor for the project at ``root``.

    Raises:
        ConfigNotFoundError: If no readable package.json exists at ``root``.
        ConfigError: If archmap.toml exists but is invalid.
    """
    root = Path(root).expanduser().resolve()
    manifest_path, manifest = _read_manifest(root)

    ts_config_path, base_dir, scan_target = find_ts_config(root)

    tool_config_path = find_tool_config(root)
    if tool_config_path is None:
        logger.info("no dependency-cruiser config found above %s", root)

    rule_config = load_rule_config(root)
    rule_config_path = root / CONFIG_FILENAME if rule_config is not None else None

    name = manifest.get("name")
    version = manifest.get("version")
    return ProjectDescriptor(
        root=root,
        manifest_path=manifest_path,
        base_dir=base_dir,
        scan_target=scan_target,
        ruleset=build_ruleset(rule_config),
        project_name=name if isinstance(name, str) else None,
        project_version=version if isinstance(version, str) else None,
        ts_config_path=ts_config_path,
        tool_config_path=tool_config_path,
        rule_config_path=rule_config_path,
    )


__all__ = [
    "MANIFEST_FILENAME",
    "TOOL_CONFIG_FILENAMES",
    "ProjectDescriptor",
    "find_tool_config",
    "find_ts_config",
    "load_descriptor",
]
