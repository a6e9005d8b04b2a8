"""Mapping of module paths to caller-supplied stable identifiers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from classify.models import ArchitectureWarning, WarningType
from utils import canonical_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from classify.models import Violation

logger = logging.getLogger(__name__)


class IdentityMap:
    """Lookup from absolute path to stable identifier.

    Keys and lookups are both compared in canonical form (symlinks
    resolved), so a project reached through a symlinked directory matches
    a mapping keyed by either spelling. The mapping may be a partial view
    of the project; lookups for paths it does not cover return None.
    """

    def __init__(self, file_ids: Mapping[str, str]) -> None:
        self._ids = {canonical_path(path): file_id for path, file_id in file_ids.items()}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and canonical_path(path) in self._ids

    def get(self, path: str | None) -> str | None:
        if path is None:
            return None
        return self._ids.get(canonical_path(path))


def resolve_identities(
    violations: Iterable[Violation],
    file_ids: Mapping[str, str] | IdentityMap,
) -> list[ArchitectureWarning]:
    """Translate path-addressed violations into id-addressed warnings.

    Violations on modules absent from ``file_ids`` are dropped without
    error. Unresolvable targets and cycle partners are omitted from the
    warning rather than failing it.
    """
    id_map = file_ids if isinstance(file_ids, IdentityMap) else IdentityMap(file_ids)

    seen: set[tuple[str, WarningType]] = set()
    warnings: list[ArchitectureWarning] = []
    dropped = 0
    for violation in violations:
        file_id = id_map.get(violation.module)
        if file_id is None:
            dropped += 1
            logger.debug("no identifier for %s; dropping %s", violation.module, violation.type)
            continue
        if (file_id, violation.type) in seen:
            continue
        seen.add((file_id, violation.type))

        related = tuple(
            related_id
            for related_id in (id_map.get(path) for path in violation.related)
            if related_id is not None
        )
        warnings.append(
            ArchitectureWarning(
                type=violation.type,
                file_id=file_id,
                message=violation.message,
                severity=violation.severity,
                rule_name=violation.rule_name,
                target_id=id_map.get(violation.target),
                related_file_ids=related,
            )
        )

    if dropped:
        logger.debug("dropped %d violation(s) on unmapped modules", dropped)
    return warnings


__all__ = ["IdentityMap", "resolve_identities"]
