from __future__ import annotations

import re
import tomllib
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

CONFIG_FILENAME = "archmap.toml"

DEFAULT_ENTRY_BLOAT_THRESHOLD = 15
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_RULESET_VERSION = 1

Severity = Literal["error", "warn", "info"]

_STRICT = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class PathPredicate(BaseModel):
    """Regex-based predicate over a module's project-relative path."""

    model_config = _STRICT

    path: tuple[str, ...] = Field(
        default=(),
        description="Regexes; the module matches if any of them is found",
    )
    path_not: tuple[str, ...] = Field(
        default=(),
        alias="pathNot",
        description="Regexes; the module is excluded if any of them is found",
    )

    @field_validator("path", "path_not", mode="before")
    @classmethod
    def validate_patterns(cls, v: Any) -> Any:
        """Accept a single regex or a list of them; reject invalid regexes."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = (v,)
        if isinstance(v, (list, tuple)):
            for pattern in v:
                if not isinstance(pattern, str):
                    msg = "path patterns must be strings"
                    raise ValueError(msg)
                try:
                    re.compile(pattern)
                except re.error as exc:
                    msg = f"Invalid path pattern {pattern!r}: {exc}"
                    raise ValueError(msg) from exc
        return v


class TargetPredicate(PathPredicate):
    """Predicate for the dependency side of a rule."""

    circular: bool = Field(
        default=False,
        description="Match only edges that participate in a cycle",
    )


class Rule(BaseModel):
    """A named forbidden-dependency policy."""

    model_config = _STRICT

    name: str = Field(min_length=1)
    severity: Severity = "error"
    comment: str | None = None
    from_: PathPredicate = Field(default_factory=PathPredicate, alias="from")
    to: TargetPredicate = Field(default_factory=TargetPredicate)

    @field_validator("from_", "to", mode="before")
    @classmethod
    def validate_predicate(cls, v: Any) -> Any:
        """Expand ``from = "utils/"`` shorthand into ``{ path = "utils/" }``."""
        if v is None:
            return {}
        if isinstance(v, (str, list, tuple)):
            return {"path": v}
        return v

    @property
    def circular(self) -> bool:
        return self.to.circular


class AnalysisOptions(BaseModel):
    """Global analysis options."""

    model_config = _STRICT

    ts_pre_compilation_deps: bool = Field(
        default=False,
        description="Include type-only (pre-compilation) dependencies",
    )
    entry_bloat_enabled: bool = Field(default=True)
    entry_bloat_threshold: int = Field(
        default=DEFAULT_ENTRY_BLOAT_THRESHOLD,
        ge=0,
        description="Flag modules with strictly more direct dependencies",
    )
    entry_bloat_pattern: str | None = Field(
        default=None,
        description="Only check modules whose relative path matches this regex",
    )
    entry_bloat_severity: Severity = "warn"
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    trust_tool_cycles: bool = Field(
        default=True,
        description="Use the analysis tool's cycle annotations when complete",
    )
    exclude: str | None = Field(
        default=None,
        description="Regex of paths the analysis tool should skip",
    )
    disable_defaults: bool = Field(
        default=False,
        description="Start from an empty built-in rule list",
    )

    @field_validator("entry_bloat_pattern", "exclude")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                msg = f"Invalid regex {v!r}: {exc}"
                raise ValueError(msg) from exc
        return v


class RuleConfig(BaseModel):
    """Contents of a project-local archmap.toml."""

    model_config = _STRICT

    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
    forbidden: tuple[Rule, ...] = Field(default_factory=tuple)


class RuleSet(BaseModel):
    """Effective, ordered rule set for one analysis run."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[Rule, ...] = ()
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
    version: int = DEFAULT_RULESET_VERSION

    def rule_names(self) -> list[str]:
        return [rule.name for rule in self.rules]


_DATA = "(^|/)src/.*(models?|schemas?|entities?|repositories?|database|db)/.+"
_LIB = "(^|/)src/.*(utils?|helpers?|lib|common|shared)/.+"
_CORE = "(^|/)src/.*(services?|domain|core|business|managers?)/.+"
_API = "(^|/)src/.*(api|routes?|controllers?)/.+"
_UI = "(^|/)src/.*(components?|views?|pages?|ui)/.+"
_ENTRY = "(^|/)src/.*(main|index|app|cli|bin)/.+"

# Layers, high to low: entry -> api -> core -> data -> lib; ui -> core, data, lib.
DEFAULT_RULES: tuple[Rule, ...] = (
    Rule.model_validate(
        {
            "name": "no-circular",
            "severity": "error",
            "comment": None,
            "from": {},
            "to": {"circular": True},
        }
    ),
    Rule.model_validate(
        {
            "name": "layer-data-lib-only",
            "severity": "error",
            "comment": "Data layer should only depend on Lib layer (or itself)",
            "from": {"path": _DATA},
            "to": {"path_not": [_DATA, _LIB, "(^|/)node_modules/"]},
        }
    ),
    Rule.model_validate(
        {
            "name": "layer-core-no-entry-ui",
            "severity": "error",
            "comment": "Core layer should not depend on Entry or UI layers",
            "from": {"path": _CORE},
            "to": {"path": [_ENTRY, _UI]},
        }
    ),
    Rule.model_validate(
        {
            "name": "layer-lib-standalone",
            "severity": "error",
            "comment": "Lib layer should be standalone (no dependencies on other layers)",
            "from": {"path": _LIB},
            "to": {"path": [_DATA, _CORE, _API, _UI, _ENTRY]},
        }
    ),
)


def merge_rules(defaults: Iterable[Rule], overrides: Iterable[Rule]) -> tuple[Rule, ...]:
    """Merge user rules into defaults by name.

    A user rule whose name matches a default replaces it in place; other
    user rules are appended in file order. Among user rules sharing a
    name, the last one wins.
    """
    merged: dict[str, Rule] = {rule.name: rule for rule in defaults}
    for rule in overrides:
        merged[rule.name] = rule
    return tuple(merged.values())


def build_ruleset(config: RuleConfig | None = None) -> RuleSet:
    """Build the effective rule set from built-in defaults and user config."""
    if config is None:
        config = RuleConfig()
    defaults = () if config.options.disable_defaults else DEFAULT_RULES
    return RuleSet(
        rules=merge_rules(defaults, config.forbidden),
        options=config.options,
    )


def load_rule_config(root: Path) -> RuleConfig | None:
    """Load archmap.toml from the project root if it exists."""
    config_path = root / CONFIG_FILENAME

    if not config_path.is_file():
        return None

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return RuleConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
