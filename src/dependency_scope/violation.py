from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .context import TraversalContext
from .model import Artifact, Dependency

__all__ = ["DependencyViolation"]


@dataclass(frozen=True, slots=True)
class DependencyViolation:
    """A runtime dependency on a coordinate the project declared test-scoped."""

    source: TraversalContext
    dependency: Dependency

    @property
    def declared_by(self) -> Artifact:
        return self.source.current_artifact

    @property
    def path(self) -> List[str]:
        names = [artifact.display_name for artifact in self.source.path]
        names.append(f"{self.dependency.coordinate.display_name}:{self.dependency.scope}")
        return names

    def to_dict(self) -> dict:
        return {
            "dependency": self.dependency.coordinate.display_name,
            "scope": str(self.dependency.scope),
            "declared_by": self.declared_by.display_name,
            "path": self.path,
        }
