"""Concurrent traversal of the transitive dependency tree.

The engine walks the tree breadth first. Every artifact in the current wave
has its descriptor resolved on the executor, and results are consumed in the
order the work was submitted. Consuming in submission order keeps the
"already seen" short-circuit deterministic, so the bounded pool and the
synchronous executor report the same violations for the same input.

The price is head-of-line blocking: a slow descriptor early in a wave delays
scheduling the children of later steps in that wave, even when their
descriptors have already been resolved. The next wave only starts once the
slow one has been consumed.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Hashable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .context import TraversalContext
from .errors import config_error
from .model import Artifact, Dependency
from .resolvers import DescriptorResolver
from .violation import DependencyViolation

log = logging.getLogger(__name__)

__all__ = [
    "TraversalEngine",
    "TraversalResult",
    "TraversalStats",
    "default_max_workers",
]

THREAD_NAME_PREFIX = "dependency-project-builder"


def default_max_workers() -> int:
    return min((os.cpu_count() or 1) * 5, 20)


class _DirectExecutor(Executor):
    """Run each submission inline in the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


@dataclass(slots=True)
class TraversalStats:
    resolved: int = 0
    deduplicated: int = 0
    unresolvable: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "resolved": self.resolved,
            "deduplicated": self.deduplicated,
            "unresolvable": sorted(set(self.unresolvable)),
        }


@dataclass(frozen=True, slots=True)
class TraversalResult:
    violations: FrozenSet[DependencyViolation]
    stats: TraversalStats


@dataclass(slots=True)
class _Step:
    artifact: Artifact
    context: TraversalContext
    descriptor: Future


class _Traversal:
    """State scoped to a single traversal.

    Only the coordinating thread touches the seen set and the descriptor
    cache; worker threads only run resolver calls.
    """

    def __init__(self, resolver: DescriptorResolver, executor: Executor, strict_exclusions: bool) -> None:
        self._resolver = resolver
        self._executor = executor
        self._strict_exclusions = strict_exclusions
        self._seen: Set[Hashable] = set()
        self._descriptors: Dict[Artifact, Future] = {}
        self.violations: Set[DependencyViolation] = set()
        self.stats = TraversalStats()

    def schedule(self, artifact: Artifact, context: TraversalContext) -> Optional[_Step]:
        key: Hashable = (artifact, context.exclusions) if self._strict_exclusions else artifact
        if key in self._seen:
            self.stats.deduplicated += 1
            log.debug("Already visited %s, skipping %s", artifact, " -> ".join(map(str, context.path)))
            return None
        self._seen.add(key)

        descriptor = self._descriptors.get(artifact)
        if descriptor is None:
            descriptor = self._executor.submit(self._resolver.resolve_direct_dependencies, artifact)
            self._descriptors[artifact] = descriptor
            self.stats.resolved += 1
        return _Step(artifact, context, descriptor)

    def cancel_pending(self) -> None:
        for future in self._descriptors.values():
            future.cancel()


class TraversalEngine:
    """Find dependencies that a non-test branch needs but the project made test-scoped."""

    def __init__(
        self,
        resolver: DescriptorResolver,
        *,
        parallel: bool = True,
        max_workers: Optional[int] = None,
        strict_exclusions: bool = False,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise config_error(f"max_workers must be positive, got {max_workers}")
        self._resolver = resolver
        self._parallel = parallel
        self._max_workers = max_workers or default_max_workers()
        self._strict_exclusions = strict_exclusions

    @property
    def parallel(self) -> bool:
        return self._parallel

    @property
    def max_workers(self) -> int:
        return self._max_workers if self._parallel else 1

    def find_violations(self, artifact: Artifact, context: TraversalContext) -> Set[DependencyViolation]:
        return set(self.traverse([(artifact, context)]).violations)

    def traverse(self, starts: Iterable[Tuple[Artifact, TraversalContext]]) -> TraversalResult:
        """Traverse from every ``(artifact, context)`` pair in one shared scope.

        Any resolver error aborts the whole traversal and is re-raised;
        violations found so far are discarded.
        """
        executor = self._new_executor()
        traversal = _Traversal(self._resolver, executor, self._strict_exclusions)
        completed = False
        try:
            wave = [step for step in (traversal.schedule(a, c) for a, c in starts) if step]
            while wave:
                next_wave: List[_Step] = []
                for step in wave:
                    dependencies = step.descriptor.result()
                    for child_artifact, child_context in self._visit(step.context, dependencies, traversal):
                        child = traversal.schedule(child_artifact, child_context)
                        if child is not None:
                            next_wave.append(child)
                wave = next_wave
            completed = True
        finally:
            if not completed:
                traversal.cancel_pending()
            executor.shutdown(wait=completed, cancel_futures=not completed)

        log.debug(
            "Traversal finished: %d resolved, %d deduplicated, %d unresolvable, %d violation(s)",
            traversal.stats.resolved,
            traversal.stats.deduplicated,
            len(traversal.stats.unresolvable),
            len(traversal.violations),
        )
        return TraversalResult(frozenset(traversal.violations), traversal.stats)

    def _visit(
        self,
        context: TraversalContext,
        dependencies: Sequence[Dependency],
        traversal: _Traversal,
    ) -> Iterator[Tuple[Artifact, TraversalContext]]:
        required = [
            dependency
            for dependency in dependencies
            if dependency.required_at_runtime and not context.is_excluded(dependency)
        ]

        for dependency in required:
            if context.is_overridden_to_test_scope(dependency):
                traversal.violations.add(DependencyViolation(context, dependency))

        for dependency in required:
            version = context.resolve_mediated_version(dependency.coordinate)
            if version is None:
                traversal.stats.unresolvable.append(dependency.coordinate.display_name)
                log.debug(
                    "No mediated version for %s declared by %s, not descending",
                    dependency.coordinate,
                    context.current_artifact,
                )
                continue
            child_artifact = Artifact(dependency.coordinate, version)
            yield child_artifact, context.step_into(child_artifact, dependency.exclusions)

    def _new_executor(self) -> Executor:
        if self._parallel:
            log.debug("Using parallel dependency resolution (%d workers)", self._max_workers)
            return ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix=THREAD_NAME_PREFIX)
        log.debug("Using single-threaded dependency resolution")
        return _DirectExecutor()
