"""Shared utilities for archmap-core."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath


def normalize_path(file_path: str | Path, base_dir: str | Path | None = None) -> str:
    """Return the canonical identity of a module path.

    Relative paths are anchored at ``base_dir`` (or the current directory).
    The result is absolute, lexically normalized (``.`` and ``..`` folded)
    and uses forward slashes, so paths reported by the analysis tool and
    paths supplied by callers compare equal.

    Examples:
        >>> normalize_path("src/./a.ts", "/repo")
        '/repo/src/a.ts'
        >>> normalize_path("/repo/src/../lib/b.ts")
        '/repo/lib/b.ts'
    """
    path_str = os.fspath(file_path).replace("\\", "/")
    if not os.path.isabs(path_str) and base_dir is not None:
        path_str = os.path.join(os.fspath(base_dir), path_str)
    return Path(os.path.normpath(os.path.abspath(path_str))).as_posix()


def canonical_path(file_path: str | Path) -> str:
    """Return the normalized path with symlinks resolved.

    Two spellings of the same file (one through a symlinked directory, one
    through its target) map to the same canonical path.
    """
    return normalize_path(os.path.realpath(normalize_path(file_path)))


def relative_posix(file_path: str, root: str | Path) -> str:
    """Return ``file_path`` relative to ``root`` in POSIX form.

    Paths outside ``root`` are returned unchanged (still absolute).
    """
    root_str = normalize_path(root)
    try:
        return PurePosixPath(file_path).relative_to(root_str).as_posix()
    except ValueError:
        return file_path


__all__ = ["canonical_path", "normalize_path", "relative_posix"]
