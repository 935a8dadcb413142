import pytest

from dependency_scope.model import (
    RUNTIME_SCOPES,
    Artifact,
    Coordinate,
    Dependency,
    Exclusion,
    Scope,
    parse_artifact,
    parse_coordinate,
    parse_versionless_coordinate,
)


@pytest.mark.parametrize(
    "text, coordinate, version",
    [
        ("org.a:a", Coordinate("org.a", "a"), None),
        ("org.a:a:1.0", Coordinate("org.a", "a"), "1.0"),
        ("org.a:a:pom:1.0", Coordinate("org.a", "a", "pom"), "1.0"),
        ("org.a:a:jar:tests:1.0", Coordinate("org.a", "a", "jar", "tests"), "1.0"),
    ],
)
def test_parse_coordinate_forms(text, coordinate, version):
    assert parse_coordinate(text) == (coordinate, version)


@pytest.mark.parametrize("text", ["org.a", "org.a::1.0", "a:b:c:d:e:f"])
def test_parse_coordinate_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_coordinate(text)


def test_parse_artifact_requires_version():
    with pytest.raises(ValueError):
        parse_artifact("org.a:a")


def test_display_names_hide_default_extension():
    assert Coordinate("org.a", "a").display_name == "org.a:a"
    assert Coordinate("org.a", "a", "pom").display_name == "org.a:a:pom"
    assert Coordinate("org.a", "a", "jar", "tests").display_name == "org.a:a:tests"
    assert Artifact(Coordinate("org.a", "a", "zip", "dist"), "2.1").display_name == "org.a:a:zip:dist:2.1"


def test_conflict_id_ignores_version():
    a1 = parse_artifact("org.a:a:1.0")
    a2 = parse_artifact("org.a:a:2.0")
    assert a1.coordinate == a2.coordinate
    assert a1 != a2
    assert a1.coordinate.conflict_id == "org.a:a:jar"


def test_scope_parse():
    assert Scope.parse(None) is Scope.COMPILE
    assert Scope.parse("") is Scope.COMPILE
    assert Scope.parse("Runtime") is Scope.RUNTIME
    assert Scope.parse(Scope.TEST) is Scope.TEST
    with pytest.raises(ValueError):
        Scope.parse("import-ish")
    assert RUNTIME_SCOPES == {Scope.COMPILE, Scope.RUNTIME}


def test_exclusion_wildcards():
    any_kind = Exclusion.parse("org.a:a")
    assert any_kind.matches(Coordinate("org.a", "a"))
    assert any_kind.matches(Coordinate("org.a", "a", "pom", "sources"))
    assert not any_kind.matches(Coordinate("org.a", "b"))
    assert not any_kind.matches(Coordinate("org.b", "a"))

    jar_tests = Exclusion.parse("org.a:a:jar:tests")
    assert jar_tests.matches(Coordinate("org.a", "a", "jar", "tests"))
    assert not jar_tests.matches(Coordinate("org.a", "a"))

    pom_any = Exclusion("org.a", "a", "pom")
    assert pom_any.matches(Coordinate("org.a", "a", "pom", "x"))
    assert not pom_any.matches(Coordinate("org.a", "a"))


def test_exclusion_parse_rejects_malformed():
    with pytest.raises(ValueError):
        Exclusion.parse("org.a")


def test_dependency_required_at_runtime():
    coordinate = Coordinate("org.a", "a")
    assert Dependency(coordinate, "1", Scope.COMPILE).required_at_runtime
    assert Dependency(coordinate, "1", Scope.RUNTIME).required_at_runtime
    assert not Dependency(coordinate, "1", Scope.RUNTIME, optional=True).required_at_runtime
    for scope in (Scope.TEST, Scope.PROVIDED, Scope.SYSTEM):
        assert not Dependency(coordinate, "1", scope).required_at_runtime


def test_parse_versionless_coordinate():
    assert parse_versionless_coordinate("org.a:a") == Coordinate("org.a", "a")
    assert parse_versionless_coordinate("org.a:a:war") == Coordinate("org.a", "a", "war")
    assert parse_versionless_coordinate("org.a:a:jar:tests") == Coordinate("org.a", "a", "jar", "tests")
    with pytest.raises(ValueError):
        parse_versionless_coordinate("org.a:a:jar:tests:1.0")
