"""Command-line interface for archmap-core."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path

import orjson

from analysis.pipeline import analyze_sync
from analysis.summary import warning_summary
from errors import AnalysisUnavailableError, ArchmapError, ConfigError
from extract.runner import ExtractorSettings
from project.descriptor import load_descriptor


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archmap")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze the project's architecture"
    )
    _add_common_paths(analyze_parser)
    analyze_parser.add_argument(
        "--ids",
        default=None,
        help="JSON file mapping absolute module paths to ids "
        "(default: root-relative paths)",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds the analysis tool may run (default: config timeout)",
    )
    analyze_parser.add_argument(
        "--tool",
        default=None,
        help="Analysis tool command line (default: project-local or PATH depcruise)",
    )
    analyze_parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json)",
    )

    rules_parser = subparsers.add_parser("rules", help="Print the effective rule set")
    _add_common_paths(rules_parser)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_ids(ids_path: str) -> dict[str, str]:
    path = Path(ids_path).expanduser()
    try:
        data = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        msg = f"Cannot load ids from {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        msg = f"Ids file {path} must be a JSON object of path -> id strings"
        raise ConfigError(msg)
    return data


def _handle_analyze(
    root: Path,
    ids_path: str | None,
    timeout: float | None,
    tool: str | None,
    output_format: str,
) -> int:
    settings = ExtractorSettings(command=tuple(shlex.split(tool))) if tool else None
    try:
        file_ids = _load_ids(ids_path) if ids_path is not None else None
        warnings = analyze_sync(root, file_ids, timeout=timeout, settings=settings)
    except AnalysisUnavailableError as exc:
        sys.stderr.write(f"analysis unavailable: {exc}\n")
        return 2
    except ArchmapError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    if output_format == "json":
        payload = [warning.to_dict() for warning in warnings]
        sys.stdout.write(
            orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2).decode()
        )
        sys.stdout.write("\n")
    else:
        for warning in warnings:
            sys.stdout.write(
                f"{warning.severity}\t{warning.type}\t{warning.file_id}\t{warning.message}\n"
            )

    summary = warning_summary(warnings)
    sys.stderr.write(
        " ".join(f"{severity}={count}" for severity, count in summary.items()) + "\n"
    )
    return 1 if summary["error"] else 0


def _handle_rules(root: Path) -> int:
    try:
        descriptor = load_descriptor(root)
    except ArchmapError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    payload = descriptor.ruleset.model_dump(mode="json", by_alias=True)
    sys.stdout.write(
        orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2).decode()
    )
    sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()

    if args.command == "analyze":
        return _handle_analyze(root, args.ids, args.timeout, args.tool, args.format)

    if args.command == "rules":
        return _handle_rules(root)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
