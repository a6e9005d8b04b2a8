"""Typed warnings for architecture violations."""

from classify.models import (
    WARNING_TYPES,
    ArchitectureWarning,
    Violation,
    WarningType,
)
from classify.violations import classify_finding, classify_findings

__all__ = [
    "WARNING_TYPES",
    "ArchitectureWarning",
    "Violation",
    "WarningType",
    "classify_finding",
    "classify_findings",
]
