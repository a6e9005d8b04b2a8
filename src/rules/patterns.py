"""Path predicate matching."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rules.config import PathPredicate


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def matches_any(path: str, patterns: tuple[str, ...]) -> bool:
    """Return True if any regex in ``patterns`` is found in ``path``."""
    return any(_compile(pattern).search(path) for pattern in patterns)


def matches_predicate(path: str, predicate: PathPredicate) -> bool:
    """Check a project-relative POSIX path against a predicate.

    Follows dependency-cruiser semantics: ``path`` patterns are searched,
    not anchored, so ``"utils/"`` matches ``src/utils/a.ts``. An empty
    ``path`` matches everything; any ``path_not`` hit excludes the path.
    """
    if predicate.path and not matches_any(path, predicate.path):
        return False
    return not (predicate.path_not and matches_any(path, predicate.path_not))


__all__ = ["matches_any", "matches_predicate"]
