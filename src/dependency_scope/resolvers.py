"""Collaborator contracts consumed by the traversal engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Protocol, Sequence, Tuple, runtime_checkable

from .errors import descriptor_error
from .model import Artifact, Coordinate, Dependency, DependencyNode, Exclusion

log = logging.getLogger(__name__)

__all__ = [
    "ProjectGraph",
    "GraphProvider",
    "DescriptorResolver",
    "MappingDescriptorResolver",
]


@dataclass(frozen=True, slots=True)
class ProjectGraph:
    """Resolved root tree plus the tables computed from the full resolution."""

    root: DependencyNode
    version_table: Mapping[Coordinate, str] = field(default_factory=dict)
    management_exclusions: Mapping[Coordinate, FrozenSet[Exclusion]] = field(default_factory=dict)


@runtime_checkable
class GraphProvider(Protocol):
    def build_graph(self, project: object) -> ProjectGraph:
        """Build the resolved graph; raises ``GraphBuildError``."""
        ...


@runtime_checkable
class DescriptorResolver(Protocol):
    def resolve_direct_dependencies(self, artifact: Artifact) -> Sequence[Dependency]:
        """Return the dependencies declared by ``artifact``.

        Raises ``DescriptorResolutionError``. Called concurrently from the
        engine's worker threads.
        """
        ...


class MappingDescriptorResolver:
    """Answer descriptor lookups from an in-memory table.

    The table is copied on construction and never mutated afterwards, so
    concurrent lookups need no locking.
    """

    def __init__(self, descriptors: Mapping[Artifact, Iterable[Dependency]]) -> None:
        self._descriptors: Dict[Artifact, Tuple[Dependency, ...]] = {
            artifact: tuple(dependencies) for artifact, dependencies in descriptors.items()
        }

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, artifact: object) -> bool:
        return artifact in self._descriptors

    def resolve_direct_dependencies(self, artifact: Artifact) -> Sequence[Dependency]:
        try:
            dependencies = self._descriptors[artifact]
        except KeyError as exc:
            raise descriptor_error(artifact, "artifact not found in repository") from exc
        log.debug("Resolved %d dependencies for %s", len(dependencies), artifact)
        return dependencies
