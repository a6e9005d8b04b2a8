"""Architecture analysis entry points."""

from analysis.pipeline import analyze, analyze_graph, analyze_sync
from analysis.summary import warning_summary, warnings_by_file

__all__ = [
    "analyze",
    "analyze_graph",
    "analyze_sync",
    "warning_summary",
    "warnings_by_file",
]
