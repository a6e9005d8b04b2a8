"""Warning models for architecture violations."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WarningType = Literal["circular-dependency", "layer-violation", "entry-bloat"]
WarningSeverity = Literal["error", "warn", "info"]

WARNING_TYPES: tuple[WarningType, ...] = (
    "circular-dependency",
    "layer-violation",
    "entry-bloat",
)


class Violation(BaseModel):
    """A classified violation addressed by module path."""

    model_config = ConfigDict(frozen=True)

    type: WarningType
    module: str
    message: str
    severity: WarningSeverity
    rule_name: str
    target: str | None = None
    related: tuple[str, ...] = ()


class ArchitectureWarning(BaseModel):
    """A violation addressed by the caller's stable file identifier."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: WarningType
    file_id: str = Field(alias="fileId")
    message: str
    severity: WarningSeverity
    rule_name: str | None = Field(default=None, alias="ruleName")
    target_id: str | None = Field(default=None, alias="targetId")
    related_file_ids: tuple[str, ...] = Field(default=(), alias="relatedFileIds")

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


__all__ = [
    "WARNING_TYPES",
    "ArchitectureWarning",
    "Violation",
    "WarningSeverity",
    "WarningType",
]
