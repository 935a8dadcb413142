"""Detect test-scoped dependencies that other branches of the tree need at runtime."""

from .context import TraversalContext
from .engine import TraversalEngine, TraversalResult, TraversalStats
from .errors import ConfigurationError, DescriptorResolutionError, GraphBuildError, ScopeCheckError
from .model import Artifact, Coordinate, Dependency, DependencyNode, Exclusion, Scope
from .resolvers import DescriptorResolver, GraphProvider, MappingDescriptorResolver, ProjectGraph
from .runner import ScopeCheckConfig, ScopeCheckResult, ScopeCheckRunner
from .violation import DependencyViolation

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "ConfigurationError",
    "Coordinate",
    "Dependency",
    "DependencyNode",
    "DependencyViolation",
    "DescriptorResolutionError",
    "DescriptorResolver",
    "Exclusion",
    "GraphBuildError",
    "GraphProvider",
    "MappingDescriptorResolver",
    "ProjectGraph",
    "Scope",
    "ScopeCheckConfig",
    "ScopeCheckError",
    "ScopeCheckResult",
    "ScopeCheckRunner",
    "TraversalContext",
    "TraversalEngine",
    "TraversalResult",
    "TraversalStats",
    "__version__",
]
