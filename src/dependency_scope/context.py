from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from .model import Artifact, Coordinate, Dependency, DependencyNode, Exclusion, Scope

__all__ = ["TraversalContext"]

def _empty_table() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TraversalContext:
    """Immutable state carried down one path of the dependency tree.

    ``test_scoped_conflict_ids``, ``version_table`` and
    ``management_exclusions`` are computed once for the root and shared by
    every context derived from it. ``exclusions`` only grows while stepping
    down a path. Identity is the path plus the accumulated exclusions.
    """

    path: Tuple[Artifact, ...]
    exclusions: FrozenSet[Exclusion] = frozenset()
    test_scoped_conflict_ids: FrozenSet[Coordinate] = field(default=frozenset(), compare=False)
    version_table: Mapping[Coordinate, str] = field(default_factory=_empty_table, compare=False, repr=False)
    management_exclusions: Mapping[Coordinate, FrozenSet[Exclusion]] = field(
        default_factory=_empty_table, compare=False, repr=False
    )

    @classmethod
    def new_root(
        cls,
        graph: DependencyNode,
        version_table: Mapping[Coordinate, str],
        management_exclusions: Optional[Mapping[Coordinate, Iterable[Exclusion]]] = None,
    ) -> "TraversalContext":
        test_scoped = frozenset(
            child.artifact.coordinate for child in graph.children if child.scope == Scope.TEST
        )
        management = {
            coordinate: frozenset(exclusions)
            for coordinate, exclusions in (management_exclusions or {}).items()
        }
        return cls(
            path=(graph.artifact,),
            test_scoped_conflict_ids=test_scoped,
            version_table=MappingProxyType(dict(version_table)),
            management_exclusions=MappingProxyType(management),
        )

    @property
    def current_artifact(self) -> Artifact:
        return self.path[-1]

    @property
    def depth(self) -> int:
        return len(self.path) - 1

    def step_into(
        self, artifact: Artifact, declared_exclusions: Iterable[Exclusion] = ()
    ) -> "TraversalContext":
        exclusions = set(self.exclusions)
        exclusions.update(declared_exclusions)
        exclusions.update(self.management_exclusions.get(artifact.coordinate, ()))
        return TraversalContext(
            path=self.path + (artifact,),
            exclusions=frozenset(exclusions),
            test_scoped_conflict_ids=self.test_scoped_conflict_ids,
            version_table=self.version_table,
            management_exclusions=self.management_exclusions,
        )

    def resolve_mediated_version(self, coordinate: Coordinate) -> Optional[str]:
        """Mediated version for ``coordinate``, or ``None`` when unresolvable.

        A missing entry usually means the coordinate was excluded somewhere
        upstream of this path.
        """
        return self.version_table.get(coordinate)

    def is_excluded(self, dependency: Dependency) -> bool:
        return any(exclusion.matches(dependency.coordinate) for exclusion in self.exclusions)

    def is_overridden_to_test_scope(self, dependency: Dependency) -> bool:
        return dependency.coordinate in self.test_scoped_conflict_ids and not self.is_excluded(dependency)
