"""Value types for artifact coordinates, dependency declarations and exclusions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

__all__ = [
    "Scope",
    "RUNTIME_SCOPES",
    "WILDCARD",
    "Coordinate",
    "Artifact",
    "Exclusion",
    "Dependency",
    "DependencyNode",
    "parse_artifact",
    "parse_coordinate",
    "parse_versionless_coordinate",
]

WILDCARD = "*"
DEFAULT_EXTENSION = "jar"


class Scope(str, Enum):
    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"
    PROVIDED = "provided"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: "str | Scope | None") -> "Scope":
        if value is None or value == "":
            return cls.COMPILE
        if isinstance(value, Scope):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown dependency scope '{value}'") from None

    def __str__(self) -> str:
        return self.value


RUNTIME_SCOPES: FrozenSet[Scope] = frozenset({Scope.COMPILE, Scope.RUNTIME})


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Version independent artifact identity, used as the conflict id."""

    group: str
    artifact: str
    extension: str = DEFAULT_EXTENSION
    classifier: str = ""

    @property
    def conflict_id(self) -> str:
        key = f"{self.group}:{self.artifact}:{self.extension}"
        if self.classifier:
            key += f":{self.classifier}"
        return key

    @property
    def display_name(self) -> str:
        name = f"{self.group}:{self.artifact}"
        if self.extension and self.extension != DEFAULT_EXTENSION:
            name += f":{self.extension}"
        if self.classifier:
            name += f":{self.classifier}"
        return name

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True, slots=True)
class Artifact:
    coordinate: Coordinate
    version: str

    @property
    def display_name(self) -> str:
        return f"{self.coordinate.display_name}:{self.version}"

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True, slots=True)
class Exclusion:
    group: str
    artifact: str
    extension: str = WILDCARD
    classifier: str = WILDCARD

    def matches(self, coordinate: Coordinate) -> bool:
        if self.group != coordinate.group or self.artifact != coordinate.artifact:
            return False
        if self.extension != WILDCARD and self.extension != coordinate.extension:
            return False
        if self.classifier != WILDCARD and self.classifier != coordinate.classifier:
            return False
        return True

    @classmethod
    def parse(cls, text: str) -> "Exclusion":
        parts = [part.strip() for part in str(text).split(":")]
        if len(parts) < 2 or len(parts) > 4 or not all(parts):
            raise ValueError(f"Invalid exclusion '{text}', expected group:artifact[:extension[:classifier]]")
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.extension}:{self.classifier}"


@dataclass(frozen=True, slots=True)
class Dependency:
    """A dependency as declared by some artifact's descriptor."""

    coordinate: Coordinate
    version: Optional[str] = None
    scope: Scope = Scope.COMPILE
    optional: bool = False
    exclusions: FrozenSet[Exclusion] = field(default_factory=frozenset)

    @property
    def required_at_runtime(self) -> bool:
        return self.scope in RUNTIME_SCOPES and not self.optional

    def __str__(self) -> str:
        version = f":{self.version}" if self.version else ""
        return f"{self.coordinate.display_name}{version}:{self.scope}"


@dataclass(frozen=True, slots=True)
class DependencyNode:
    """Node of an already resolved dependency tree."""

    artifact: Artifact
    scope: Scope = Scope.COMPILE
    children: Tuple["DependencyNode", ...] = ()
    exclusions: FrozenSet[Exclusion] = field(default_factory=frozenset)
    optional: bool = False

    def iter_breadth_first(self) -> Iterable["DependencyNode"]:
        queue = [self]
        while queue:
            current = queue.pop(0)
            yield current
            queue.extend(current.children)


def _split(text: str) -> list[str]:
    parts = [part.strip() for part in str(text).split(":")]
    if not all(parts):
        raise ValueError(f"Invalid coordinate '{text}'")
    return parts


def parse_coordinate(text: str) -> Tuple[Coordinate, Optional[str]]:
    """Parse ``g:a``, ``g:a:v``, ``g:a:ext:v`` or ``g:a:ext:cls:v``.

    Returns the coordinate and the version, which is ``None`` for the
    two-part form.
    """
    parts = _split(text)
    if len(parts) == 2:
        return Coordinate(parts[0], parts[1]), None
    if len(parts) == 3:
        return Coordinate(parts[0], parts[1]), parts[2]
    if len(parts) == 4:
        return Coordinate(parts[0], parts[1], parts[2]), parts[3]
    if len(parts) == 5:
        return Coordinate(parts[0], parts[1], parts[2], parts[3]), parts[4]
    raise ValueError(f"Invalid coordinate '{text}'")


def parse_versionless_coordinate(text: str) -> Coordinate:
    """Parse ``g:a``, ``g:a:ext`` or ``g:a:ext:cls``, as used by table keys."""
    parts = _split(text)
    if len(parts) < 2 or len(parts) > 4:
        raise ValueError(f"Invalid coordinate '{text}', expected group:artifact[:extension[:classifier]]")
    return Coordinate(*parts)


def parse_artifact(text: str) -> Artifact:
    coordinate, version = parse_coordinate(text)
    if version is None:
        raise ValueError(f"Artifact '{text}' has no version")
    return Artifact(coordinate, version)
