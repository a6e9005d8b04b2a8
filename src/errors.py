"""Error taxonomy for archmap-core.

Two families reach the caller of ``analyze``:

- ``ConfigError`` and its subclass ``ConfigNotFoundError``: there is no valid
  project to analyze. The run is over.
- ``AnalysisUnavailableError`` subclasses: the external analysis could not
  produce a graph for this run. Callers treat architecture analysis as
  unavailable and keep going.
"""

from __future__ import annotations


class ArchmapError(Exception):
    """Base exception for all archmap-core errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(ArchmapError):
    """Raised when a config file exists but cannot be parsed."""


class ConfigNotFoundError(ConfigError):
    """Raised when no project manifest establishes the project identity."""

    def __init__(self, root: str, reason: str):
        super().__init__(
            f"No project manifest found in {root}",
            details={"root": root, "reason": reason},
        )
        self.root = root
        self.reason = reason


class AnalysisUnavailableError(ArchmapError):
    """Base class for failures of the external analysis process."""


class ToolUnavailableError(AnalysisUnavailableError):
    """Raised when the analysis tool cannot be started."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"Analysis tool could not be started: {command}",
            details={"command": command, "reason": reason},
        )
        self.command = command
        self.reason = reason


class AnalysisTimeoutError(AnalysisUnavailableError):
    """Raised when the analysis process exceeds its time budget."""

    def __init__(self, command: str, timeout: float):
        super().__init__(
            f"Analysis did not finish within {timeout:g}s",
            details={"command": command, "timeout": f"{timeout:g}"},
        )
        self.command = command
        self.timeout = timeout


class AnalysisFailedError(AnalysisUnavailableError):
    """Raised when the analysis process exits unsuccessfully."""

    def __init__(self, command: str, returncode: int, stderr: str):
        super().__init__(
            f"Analysis exited with status {returncode}",
            details={"command": command, "stderr": stderr.strip()},
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class MalformedOutputError(AnalysisUnavailableError):
    """Raised when the analysis output is not a usable JSON document."""

    def __init__(self, reason: str, snippet: str = ""):
        details = {"reason": reason}
        if snippet:
            details["snippet"] = snippet
        super().__init__("Analysis output is malformed", details=details)
        self.reason = reason
        self.snippet = snippet


__all__ = [
    "AnalysisFailedError",
    "AnalysisTimeoutError",
    "AnalysisUnavailableError",
    "ArchmapError",
    "ConfigError",
    "ConfigNotFoundError",
    "MalformedOutputError",
    "ToolUnavailableError",
]
