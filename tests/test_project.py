"""Project file and descriptor repository loading."""

import json
import textwrap
from pathlib import Path

import pytest

from dependency_scope.errors import (
    E_PROJECT_FORMAT,
    E_REPOSITORY_FORMAT,
    ConfigurationError,
    DescriptorResolutionError,
    GraphBuildError,
)
from dependency_scope.model import Coordinate, Scope
from dependency_scope.project import (
    ProjectFileGraphProvider,
    load_descriptor_repository,
    load_project_graph,
)

from graph_helpers import art, excl

PROJECT_YAML = textwrap.dedent(
    """
    project: com.example:app:1.0
    dependencies:
      - coordinate: org.t:t:1.0
        scope: test
      - coordinate: org.b:b:1.0
        exclusions: [org.x:x]
        dependencies:
          - coordinate: org.c:c:2.0
            scope: runtime
            dependencies:
              - coordinate: org.d:d:4.0
      - coordinate: org.d:d:3.0
        scope: runtime
        optional: true
    dependency_management:
      - coordinate: org.c:c
        exclusions: [org.y:y]
      - coordinate: org.c:c
        exclusions: ["org.z:z:jar:tests"]
    versions:
      org.m:m: "5.0"
    """
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_project_yaml(tmp_path):
    graph = load_project_graph(_write(tmp_path / "project.yaml", PROJECT_YAML))

    root = graph.root
    assert root.artifact == art("com.example:app:1.0")
    assert [child.artifact for child in root.children] == [
        art("org.t:t:1.0"),
        art("org.b:b:1.0"),
        art("org.d:d:3.0"),
    ]
    assert [child.scope for child in root.children] == [Scope.TEST, Scope.COMPILE, Scope.RUNTIME]
    assert root.children[1].exclusions == excl("org.x:x")
    assert root.children[2].optional

    # nearest declaration wins: org.d:d:3.0 is shallower than 4.0
    assert graph.version_table[Coordinate("org.d", "d")] == "3.0"
    assert graph.version_table[Coordinate("org.c", "c")] == "2.0"
    assert graph.version_table[Coordinate("org.m", "m")] == "5.0"
    assert graph.management_exclusions[Coordinate("org.c", "c")] == excl("org.y:y", "org.z:z:jar:tests")


def test_load_project_json(tmp_path):
    data = {
        "project": "com.example:app:1.0",
        "dependencies": [{"coordinate": "org.b:b:1.0", "scope": "compile"}],
    }
    path = _write(tmp_path / "project.json", json.dumps(data))

    graph = ProjectFileGraphProvider().build_graph(path)

    assert graph.root.children[0].artifact == art("org.b:b:1.0")


def test_missing_project_file(tmp_path):
    with pytest.raises(GraphBuildError):
        load_project_graph(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "project: [unterminated",
        "- just\n- a list\n",
        "dependencies: []\n",
        "project: com.example:app\n",
        "project: com.example:app:1.0\ndependencies:\n  - coordinate: org.b:b:1.0\n    scope: sideways\n",
        "project: com.example:app:1.0\ndependencies:\n  - scope: compile\n",
    ],
)
def test_malformed_project_file(tmp_path, text):
    with pytest.raises(GraphBuildError) as excinfo:
        load_project_graph(_write(tmp_path / "project.yaml", text))
    assert excinfo.value.code == E_PROJECT_FORMAT


def test_repository_directory_is_merged(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    _write(
        repo / "a.yaml",
        textwrap.dedent(
            """
            artifacts:
              org.b:b:1.0:
                - coordinate: org.t:t:1.0
                  scope: runtime
                  exclusions: [org.q:q]
                - org.c:c
            """
        ),
    )
    _write(repo / "b.json", json.dumps({"artifacts": {"org.c:c:2.0": []}}))
    _write(repo / "notes.txt", "ignored")

    resolver = load_descriptor_repository(repo)

    assert len(resolver) == 2
    first, second = resolver.resolve_direct_dependencies(art("org.b:b:1.0"))
    assert first.scope is Scope.RUNTIME
    assert first.exclusions == excl("org.q:q")
    assert second.version is None
    assert second.scope is Scope.COMPILE
    assert resolver.resolve_direct_dependencies(art("org.c:c:2.0")) == ()
    with pytest.raises(DescriptorResolutionError) as excinfo:
        resolver.resolve_direct_dependencies(art("org.c:c:9.9"))
    assert excinfo.value.artifact == "org.c:c:9.9"
    assert excinfo.value.cause == "artifact not found in repository"
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_repository_duplicate_artifact(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    _write(repo / "a.yaml", "artifacts:\n  org.b:b:1.0: []\n")
    _write(repo / "b.yaml", "artifacts:\n  org.b:b:1.0: []\n")

    with pytest.raises(ConfigurationError) as excinfo:
        load_descriptor_repository(repo)
    assert excinfo.value.code == E_REPOSITORY_FORMAT


def test_repository_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_descriptor_repository(tmp_path / "missing")
    bad = _write(tmp_path / "bad.yaml", "artifacts: [1, 2]\n")
    with pytest.raises(ConfigurationError):
        load_descriptor_repository(bad)


def test_project_file_can_carry_descriptors(tmp_path):
    path = _write(
        tmp_path / "project.yaml",
        PROJECT_YAML + "artifacts:\n  org.b:b:1.0:\n    - org.t:t:1.0\n",
    )
    resolver = load_descriptor_repository(path)
    (dependency,) = resolver.resolve_direct_dependencies(art("org.b:b:1.0"))
    assert dependency.coordinate == Coordinate("org.t", "t")


def test_unquoted_version_is_rejected(tmp_path):
    text = "project: com.example:app:1.0\nversions:\n  com.fasterxml:jackson: 2.10\n"
    with pytest.raises(GraphBuildError) as excinfo:
        load_project_graph(_write(tmp_path / "project.yaml", text))
    assert excinfo.value.code == E_PROJECT_FORMAT
    assert "quoted string" in str(excinfo.value)


def test_quoted_version_is_kept_verbatim(tmp_path):
    text = 'project: com.example:app:1.0\nversions:\n  com.fasterxml:jackson: "2.10"\n'
    graph = load_project_graph(_write(tmp_path / "project.yaml", text))
    assert graph.version_table[Coordinate("com.fasterxml", "jackson")] == "2.10"


def test_table_keys_name_extension_and_classifier(tmp_path):
    text = textwrap.dedent(
        """
        project: com.example:app:1.0
        dependency_management:
          - coordinate: org.w:w:war
            exclusions: [org.x:x]
        versions:
          org.w:w:war: "1.0"
          org.w:w:jar:tests: "1.1"
        """
    )
    graph = load_project_graph(_write(tmp_path / "project.yaml", text))

    assert graph.management_exclusions[Coordinate("org.w", "w", "war")] == excl("org.x:x")
    assert graph.version_table[Coordinate("org.w", "w", "war")] == "1.0"
    assert graph.version_table[Coordinate("org.w", "w", "jar", "tests")] == "1.1"
