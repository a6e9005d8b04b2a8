"""Dependency graph extraction via an external analysis process."""

from extract.parser import load_cruise_result, parse_cruise_output
from extract.runner import ExtractorSettings, extract_graph, run_tool

__all__ = [
    "ExtractorSettings",
    "extract_graph",
    "load_cruise_result",
    "parse_cruise_output",
    "run_tool",
]
