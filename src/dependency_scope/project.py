"""Project file and descriptor repository loading (JSON/YAML)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Tuple

import yaml

from .errors import (
    E_PROJECT_FORMAT,
    E_REPOSITORY_FORMAT,
    config_error,
    graph_error,
)
from .model import (
    Artifact,
    Coordinate,
    Dependency,
    DependencyNode,
    Exclusion,
    Scope,
    parse_artifact,
    parse_coordinate,
    parse_versionless_coordinate,
)
from .resolvers import MappingDescriptorResolver, ProjectGraph

log = logging.getLogger(__name__)

__all__ = [
    "ProjectFileGraphProvider",
    "load_project_graph",
    "load_descriptor_repository",
    "derive_version_table",
]

_YAML_SUFFIXES = {".yaml", ".yml"}
_DATA_SUFFIXES = _YAML_SUFFIXES | {".json"}


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def _parse_exclusions(raw: Any, where: str) -> FrozenSet[Exclusion]:
    if raw is None:
        return frozenset()
    if not isinstance(raw, list):
        raise ValueError(f"{where}: 'exclusions' must be a list")
    return frozenset(Exclusion.parse(item) for item in raw)


def _parse_node(raw: Any, where: str) -> DependencyNode:
    if not isinstance(raw, dict) or "coordinate" not in raw:
        raise ValueError(f"{where}: dependency entries need a 'coordinate'")
    artifact = parse_artifact(raw["coordinate"])
    children = raw.get("dependencies") or []
    if not isinstance(children, list):
        raise ValueError(f"{where}: 'dependencies' must be a list")
    return DependencyNode(
        artifact=artifact,
        scope=Scope.parse(raw.get("scope")),
        children=tuple(
            _parse_node(child, f"{where} > {artifact}") for child in children
        ),
        exclusions=_parse_exclusions(raw.get("exclusions"), f"{where} > {artifact}"),
        optional=bool(raw.get("optional", False)),
    )


def _parse_dependency(raw: Any, where: str) -> Dependency:
    if isinstance(raw, str):
        raw = {"coordinate": raw}
    if not isinstance(raw, dict) or "coordinate" not in raw:
        raise ValueError(f"{where}: dependency entries need a 'coordinate'")
    coordinate, version = parse_coordinate(raw["coordinate"])
    return Dependency(
        coordinate=coordinate,
        version=version,
        scope=Scope.parse(raw.get("scope")),
        optional=bool(raw.get("optional", False)),
        exclusions=_parse_exclusions(raw.get("exclusions"), f"{where} > {coordinate}"),
    )


def derive_version_table(root: DependencyNode) -> Dict[Coordinate, str]:
    """Map each coordinate of the resolved tree to its version.

    The tree is walked breadth first and the nearest occurrence wins, so
    the table agrees with the tree the graph builder already mediated.
    """
    table: Dict[Coordinate, str] = {}
    for node in root.iter_breadth_first():
        table.setdefault(node.artifact.coordinate, node.artifact.version)
    return table


def _parse_project(data: Any) -> ProjectGraph:
    if not isinstance(data, dict):
        raise ValueError("Root of the project file must be an object")
    if "project" not in data:
        raise ValueError("Project file needs a 'project' coordinate")

    root_artifact = parse_artifact(data["project"])
    raw_children = data.get("dependencies") or []
    if not isinstance(raw_children, list):
        raise ValueError("'dependencies' must be a list")
    root = DependencyNode(
        artifact=root_artifact,
        children=tuple(_parse_node(child, str(root_artifact)) for child in raw_children),
    )

    management: Dict[Coordinate, FrozenSet[Exclusion]] = {}
    for entry in data.get("dependency_management") or []:
        if not isinstance(entry, dict) or "coordinate" not in entry:
            raise ValueError("dependency_management entries need a 'coordinate'")
        coordinate = parse_versionless_coordinate(entry["coordinate"])
        exclusions = _parse_exclusions(entry.get("exclusions"), f"dependency_management > {coordinate}")
        management[coordinate] = management.get(coordinate, frozenset()) | exclusions

    versions = derive_version_table(root)
    overrides = data.get("versions") or {}
    if not isinstance(overrides, dict):
        raise ValueError("'versions' must be a mapping")
    for key, version in overrides.items():
        coordinate = parse_versionless_coordinate(key)
        # YAML reads an unquoted 2.10 as the float 2.1
        if not isinstance(version, str):
            raise ValueError(f"versions > {coordinate}: version must be a quoted string, got {version!r}")
        versions[coordinate] = version

    return ProjectGraph(root=root, version_table=versions, management_exclusions=management)


def load_project_graph(path: str | Path) -> ProjectGraph:
    p = Path(path)
    if not p.is_file():
        raise graph_error(f"Project file not found: {p}", {"path": str(p)})
    try:
        data = _read_document(p)
        graph = _parse_project(data)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        raise graph_error(
            f"Error building dependency graph from {p}: {exc}", {"path": str(p)}, code=E_PROJECT_FORMAT
        ) from exc
    log.debug(
        "Loaded project %s with %d direct dependencies", graph.root.artifact, len(graph.root.children)
    )
    return graph


class ProjectFileGraphProvider:
    """Graph provider backed by project files on disk."""

    def build_graph(self, project: str | Path) -> ProjectGraph:
        return load_project_graph(project)


def _repository_files(path: Path) -> List[Path]:
    if path.is_dir():
        return sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in _DATA_SUFFIXES)
    return [path]


def _parse_repository(data: Any, source: Path) -> List[Tuple[Artifact, Tuple[Dependency, ...]]]:
    if data is None:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("artifacts") or {}, dict):
        raise ValueError(f"{source}: expected an object with an 'artifacts' mapping")
    entries = []
    for key, raw_dependencies in (data.get("artifacts") or {}).items():
        artifact = parse_artifact(key)
        raw_dependencies = raw_dependencies or []
        if not isinstance(raw_dependencies, list):
            raise ValueError(f"{source}: dependencies of {artifact} must be a list")
        dependencies = tuple(_parse_dependency(raw, str(artifact)) for raw in raw_dependencies)
        entries.append((artifact, dependencies))
    return entries


def load_descriptor_repository(path: str | Path) -> MappingDescriptorResolver:
    """Load artifact descriptors from a file or a directory of files.

    Directory contents are merged in file name order; an artifact described
    twice is an error.
    """
    p = Path(path)
    if not p.exists():
        raise config_error(f"Descriptor repository not found: {p}", {"path": str(p)})

    descriptors: Dict[Artifact, Tuple[Dependency, ...]] = {}
    origins: Dict[Artifact, Path] = {}
    for source in _repository_files(p):
        try:
            entries = _parse_repository(_read_document(source), source)
        except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
            raise config_error(
                f"Invalid descriptor repository file {source}: {exc}",
                {"path": str(source)},
                code=E_REPOSITORY_FORMAT,
            ) from exc
        for artifact, dependencies in entries:
            if artifact in descriptors:
                raise config_error(
                    f"Artifact {artifact} is described in both {origins[artifact]} and {source}",
                    {"artifact": artifact.display_name},
                    code=E_REPOSITORY_FORMAT,
                )
            descriptors[artifact] = dependencies
            origins[artifact] = source

    log.debug("Loaded %d artifact descriptor(s) from %s", len(descriptors), p)
    return MappingDescriptorResolver(descriptors)
