from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from .context import TraversalContext
from .engine import TraversalEngine, TraversalStats
from .model import Artifact, Scope
from .project import ProjectFileGraphProvider, load_descriptor_repository
from .reporting import report_violations
from .resolvers import DescriptorResolver, GraphProvider
from .violation import DependencyViolation

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ScopeCheckConfig:
    project_file: Path
    repository: Optional[Path] = None
    parallel: bool = True
    max_workers: Optional[int] = None
    strict_exclusions: bool = False
    fail: bool = False
    skip: bool = False
    link_to_documentation: bool = False
    logger: logging.Logger | None = None


@dataclass(slots=True)
class ScopeCheckResult:
    violations: FrozenSet[DependencyViolation] = frozenset()
    stats: TraversalStats = field(default_factory=TraversalStats)
    skipped: bool = False
    fail_on_violations: bool = False

    @property
    def failed(self) -> bool:
        return self.fail_on_violations and bool(self.violations)


class ScopeCheckRunner:
    """Build the project graph and check every non-test branch of it."""

    def __init__(
        self,
        graph_provider: GraphProvider | None = None,
        resolver: DescriptorResolver | None = None,
    ) -> None:
        self._graph_provider = graph_provider if graph_provider is not None else ProjectFileGraphProvider()
        self._resolver = resolver

    def run(self, config: ScopeCheckConfig) -> ScopeCheckResult:
        logger = config.logger or log
        if config.skip:
            logger.info("Skipping plugin execution")
            return ScopeCheckResult(skipped=True)

        graph = self._graph_provider.build_graph(config.project_file)
        resolver = self._resolver
        if resolver is None:
            resolver = load_descriptor_repository(config.repository or config.project_file)

        context = TraversalContext.new_root(graph.root, graph.version_table, graph.management_exclusions)
        starts: List[Tuple[Artifact, TraversalContext]] = []
        for child in graph.root.children:
            if child.scope == Scope.TEST:
                continue
            starts.append((child.artifact, context.step_into(child.artifact, child.exclusions)))
        log.debug(
            "Checking %d non-test dependencies of %s against %d test-scoped one(s)",
            len(starts),
            graph.root.artifact,
            len(context.test_scoped_conflict_ids),
        )

        engine = TraversalEngine(
            resolver,
            parallel=config.parallel,
            max_workers=config.max_workers,
            strict_exclusions=config.strict_exclusions,
        )
        traversal = engine.traverse(starts)

        if traversal.stats.unresolvable:
            logger.warning(
                "Skipped %d dependency declaration(s) without a mediated version: %s",
                len(traversal.stats.unresolvable),
                ", ".join(sorted(set(traversal.stats.unresolvable))),
            )

        report_violations(
            traversal.violations,
            logger,
            fail=config.fail,
            link_to_documentation=config.link_to_documentation,
        )
        return ScopeCheckResult(
            violations=traversal.violations,
            stats=traversal.stats,
            fail_on_violations=config.fail,
        )


__all__ = ["ScopeCheckRunner", "ScopeCheckConfig", "ScopeCheckResult"]
