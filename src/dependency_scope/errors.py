"""Error definitions for dependency scope checking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .model import Artifact

E_GRAPH_BUILD = "E_GRAPH_BUILD"
E_PROJECT_FORMAT = "E_PROJECT_FORMAT"
E_DESCRIPTOR = "E_DESCRIPTOR"
E_REPOSITORY_FORMAT = "E_REPOSITORY_FORMAT"
E_CONFIG = "E_CONFIG"


@dataclass
class ScopeCheckError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class GraphBuildError(ScopeCheckError):
    pass


class DescriptorResolutionError(ScopeCheckError):
    @property
    def artifact(self) -> Optional[str]:
        return (self.context or {}).get("artifact")

    @property
    def cause(self) -> Optional[str]:
        return (self.context or {}).get("cause")


class ConfigurationError(ScopeCheckError):
    pass


def graph_error(
    message: str, context: Optional[Dict[str, Any]] = None, *, code: str = E_GRAPH_BUILD
) -> GraphBuildError:
    return GraphBuildError(code=code, message=message, context=context)


def descriptor_error(artifact: "Artifact", cause: BaseException | str) -> DescriptorResolutionError:
    return DescriptorResolutionError(
        code=E_DESCRIPTOR,
        message=f"Error building dependency project {artifact.display_name}: {cause}",
        context={"artifact": artifact.display_name, "cause": str(cause)},
    )


def config_error(
    message: str, context: Optional[Dict[str, Any]] = None, *, code: str = E_CONFIG
) -> ConfigurationError:
    return ConfigurationError(code=code, message=message, context=context)


__all__ = [
    "ScopeCheckError",
    "GraphBuildError",
    "DescriptorResolutionError",
    "ConfigurationError",
    "graph_error",
    "descriptor_error",
    "config_error",
    "E_GRAPH_BUILD",
    "E_PROJECT_FORMAT",
    "E_DESCRIPTOR",
    "E_REPOSITORY_FORMAT",
    "E_CONFIG",
]
