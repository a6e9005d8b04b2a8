"""Grouping and counting helpers for warning lists."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from classify.models import ArchitectureWarning


def warnings_by_file(
    warnings: Iterable[ArchitectureWarning],
) -> dict[str, list[ArchitectureWarning]]:
    """Group warnings by file id, keeping their order within each file."""
    by_file: dict[str, list[ArchitectureWarning]] = {}
    for warning in warnings:
        by_file.setdefault(warning.file_id, []).append(warning)
    return by_file


def warning_summary(warnings: Iterable[ArchitectureWarning]) -> dict[str, int]:
    summary = {"error": 0, "warn": 0, "info": 0}
    for warning in warnings:
        summary[warning.severity] += 1
    return summary


__all__ = ["warning_summary", "warnings_by_file"]
