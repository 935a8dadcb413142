"""Presentation of violations: grouping, ordering, log output and JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .engine import TraversalStats
from .violation import DependencyViolation

__all__ = [
    "DOCUMENTATION_URL",
    "ViolationGroup",
    "group_violations",
    "format_group",
    "report_violations",
    "violations_to_json",
]

DOCUMENTATION_URL = "https://github.com/HubSpot/dependency-scope-maven-plugin#how-to-fix-issues"


@dataclass(frozen=True, slots=True)
class ViolationGroup:
    dependency: str
    violations: tuple[DependencyViolation, ...]


def group_violations(violations: Iterable[DependencyViolation]) -> List[ViolationGroup]:
    """Group by conflicting dependency, each group sorted by declaring artifact."""
    grouped: Dict[str, Dict[str, DependencyViolation]] = {}
    for violation in violations:
        key = violation.dependency.coordinate.display_name
        by_declarer = grouped.setdefault(key, {})
        # one line per declaring artifact
        name = violation.declared_by.display_name
        current = by_declarer.get(name)
        if current is None or violation.path < current.path:
            by_declarer[name] = violation
    return [
        ViolationGroup(key, tuple(by_declarer[name] for name in sorted(by_declarer)))
        for key, by_declarer in sorted(grouped.items())
    ]


def format_group(group: ViolationGroup) -> str:
    lines = [f"Found a problem with test-scoped dependency {group.dependency}"]
    for violation in group.violations:
        lines.append(
            f"  Scope {violation.dependency.scope} was expected by artifact: "
            f"{violation.declared_by.display_name}"
        )
    return "\n".join(lines)


def report_violations(
    violations: Iterable[DependencyViolation],
    logger: logging.Logger,
    *,
    fail: bool = False,
    link_to_documentation: bool = False,
) -> None:
    groups = group_violations(violations)
    if not groups:
        logger.info("No test dependency scope issues found")
        return

    level = logging.ERROR if fail else logging.WARNING
    for group in groups:
        logger.log(level, format_group(group))

    if link_to_documentation:
        logger.info("For information on how to fix these issues, see here:\n  %s", DOCUMENTATION_URL)


def violations_to_json(
    violations: Iterable[DependencyViolation], stats: Optional[TraversalStats] = None
) -> str:
    ordered = sorted((v.to_dict() for v in violations), key=lambda d: (d["dependency"], d["path"]))
    payload = {"violations": ordered, "stats": stats.to_dict() if stats else {}}
    return json.dumps(payload, indent=2, sort_keys=True)
