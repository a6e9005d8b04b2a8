"""Out-of-process execution of the dependency analysis tool.

The tool runs as a child process in its own session so that a timeout or a
cancelled caller can kill it together with anything it spawned. The caller
only suspends while awaiting the process; the event loop stays free.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import signal
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from errors import (
    AnalysisFailedError,
    AnalysisTimeoutError,
    MalformedOutputError,
    ToolUnavailableError,
)
from extract.parser import parse_cruise_output

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from graph.models import DependencyGraph
    from project.descriptor import ProjectDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TOOL = "depcruise"
KILL_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class ExtractorSettings:
    """How to launch the analysis tool.

    ``command`` replaces the tool executable (and any leading arguments);
    the analysis arguments are appended to it.
    """

    command: tuple[str, ...] | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    kill_grace_seconds: float = KILL_GRACE_SECONDS


@dataclass(frozen=True)
class ToolResult:
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


def _format_invocation(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def resolve_tool_command(root: Path, settings: ExtractorSettings) -> list[str]:
    """Prefer the project's local dependency-cruiser over one on PATH."""
    if settings.command:
        return list(settings.command)
    local = root / "node_modules" / ".bin" / DEFAULT_TOOL
    if local.is_file():
        return [str(local)]
    return [DEFAULT_TOOL]


def build_tool_arguments(descriptor: ProjectDescriptor) -> list[str]:
    options = descriptor.ruleset.options
    args = ["--output-type", "json"]
    if descriptor.tool_config_path is not None:
        args.extend(["--config", str(descriptor.tool_config_path)])
    else:
        args.append("--no-config")
    if descriptor.ts_config_path is not None:
        args.extend(["--ts-config", str(descriptor.ts_config_path)])
    if options.ts_pre_compilation_deps:
        args.append("--ts-pre-compilation-deps")
    if options.exclude:
        args.extend(["--exclude", options.exclude])
    args.append(descriptor.scan_target)
    return args


def _kill_process_group(proc: asyncio.subprocess.Process) -> None:
    """Best-effort kill of the process group."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        return
    except OSError:
        # Fall back to process-only kill.
        try:
            proc.kill()
        except ProcessLookupError:
            return


async def _terminate(proc: asyncio.subprocess.Process, grace: float) -> None:
    if proc.returncode is not None:
        return
    _kill_process_group(proc)
    try:
        await asyncio.wait_for(proc.wait(), grace)
    except TimeoutError:
        logger.warning("analysis process %d did not exit after kill", proc.pid)


async def run_tool(
    argv: Sequence[str],
    *,
    cwd: Path,
    timeout: float,
    env: Mapping[str, str] | None = None,
    kill_grace_seconds: float = KILL_GRACE_SECONDS,
) -> ToolResult:
    """Run ``argv`` to completion and capture its output.

    Raises:
        ToolUnavailableError: If the process cannot be started.
        AnalysisTimeoutError: If it runs longer than ``timeout`` seconds;
            the whole process group is killed first.
    """
    invocation = _format_invocation(argv)
    logger.debug("running %s (cwd=%s, timeout=%gs)", invocation, cwd, timeout)

    process_env = None
    if env:
        process_env = {**os.environ, **env}

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=process_env,
            start_new_session=True,  # enables killpg
        )
    except OSError as exc:
        raise ToolUnavailableError(invocation, str(exc)) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError:
        await _terminate(proc, kill_grace_seconds)
        logger.warning("analysis timed out after %gs: %s", timeout, invocation)
        raise AnalysisTimeoutError(invocation, timeout) from None
    except asyncio.CancelledError:
        await _terminate(proc, kill_grace_seconds)
        raise

    assert proc.returncode is not None
    return ToolResult(returncode=proc.returncode, stdout=stdout, stderr=stderr)


async def extract_graph(
    root: Path,
    descriptor: ProjectDescriptor,
    timeout: float | None = None,
    *,
    settings: ExtractorSettings | None = None,
) -> DependencyGraph:
    """Run the analysis tool against ``root`` and parse its dependency graph.

    Args:
        root: Project root directory
        descriptor: Loaded project descriptor for ``root``
        timeout: Seconds before the tool is killed (default: the
            ``timeout_seconds`` option of the descriptor's rule set)
        settings: Optional launch overrides

    Raises:
        ToolUnavailableError: The tool could not be started.
        AnalysisTimeoutError: The tool exceeded ``timeout``.
        AnalysisFailedError: The tool exited non-zero without a usable result.
        MalformedOutputError: The tool's output is not a cruise result.
    """
    if settings is None:
        settings = ExtractorSettings()
    options = descriptor.ruleset.options
    if timeout is None:
        timeout = options.timeout_seconds

    argv = [*resolve_tool_command(Path(root), settings), *build_tool_arguments(descriptor)]
    result = await run_tool(
        argv,
        cwd=descriptor.base_dir,
        timeout=timeout,
        env=settings.env,
        kill_grace_seconds=settings.kill_grace_seconds,
    )

    try:
        graph = parse_cruise_output(
            result.stdout,
            base_dir=descriptor.base_dir,
            root=root,
            trust_tool_cycles=options.trust_tool_cycles,
        )
    except MalformedOutputError as exc:
        if result.returncode != 0:
            raise AnalysisFailedError(
                _format_invocation(argv), result.returncode, result.stderr_text
            ) from exc
        raise

    if result.returncode != 0:
        # dependency-cruiser exits with the number of error-level violations
        # of its own config; the graph is still complete.
        logger.debug(
            "analysis exited with status %d but produced a result", result.returncode
        )
    logger.debug(
        "extracted %d modules, %d edges, %d cycle group(s)",
        len(graph.modules),
        len(graph.edges),
        len(graph.cycles),
    )
    return graph


__all__ = [
    "DEFAULT_TOOL",
    "ExtractorSettings",
    "ToolResult",
    "build_tool_arguments",
    "extract_graph",
    "resolve_tool_command",
    "run_tool",
]
